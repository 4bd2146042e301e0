ExtraInfoType = dict[str, str | None]


class ServerError(Exception):
    """A request error from the GitHub Profile Roast server."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class UnsupportedPlatformError(ServerError):
    """The platform cannot be roasted."""

    def __init__(self, platform: str, supported: list[str]):
        super().__init__(message="The platform is not supported.", extra_info={"platform": platform, "supported": ", ".join(supported)})


class UnresolvableProfileUrlError(ServerError):
    """No GitHub username could be extracted from the URL."""

    def __init__(self, profile_url: str):
        super().__init__(message="Could not extract a username from the GitHub URL.", extra_info={"profile_url": profile_url})
