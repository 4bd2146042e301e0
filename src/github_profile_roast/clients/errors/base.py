ExtraInfoType = dict[str, str | None]


class ClientError(Exception):
    """An error from one of the GitHub Profile Roast clients."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)
