from github_profile_roast.clients.errors.base import ClientError, ExtraInfoType


class ProfileError(ClientError):
    """A profile error from the GitHub profile client."""


class InvalidUsernameError(ProfileError):
    """The username does not match the GitHub login pattern."""

    def __init__(self, username: str):
        self.username: str = username
        super().__init__(message="The username is not a valid GitHub login.", extra_info={"username": username})


class ProfileNotFoundError(ProfileError):
    """Not even the public user record could be fetched."""

    def __init__(self, username: str, message: str | None = None):
        self.username: str = username
        super().__init__(message="The GitHub profile could not be found.", extra_info={"username": username, "message": message})


class ProfileSourceError(ProfileError):
    """A profile source could not build a profile. The pipeline degrades to the next source."""

    def __init__(self, source: str, message: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(message="The profile source failed.", extra_info={"source": source, "message": message, **extra_info})
