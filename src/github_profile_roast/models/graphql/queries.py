from datetime import datetime
from textwrap import dedent
from typing import Any, override

from pydantic import BaseModel, Field

from github_profile_roast.models.graphql.base import BaseGqlQuery, CountedNodes, TotalCount

MAX_PROFILE_NODES = 100


class GqlLanguage(BaseModel):
    name: str


class GqlRepository(BaseModel):
    name: str
    description: str | None = None
    stargazer_count: int = Field(default=0, validation_alias="stargazerCount")
    primary_language: GqlLanguage | None = Field(default=None, validation_alias="primaryLanguage")
    url: str
    updated_at: datetime = Field(validation_alias="updatedAt")


class GqlCreatedAt(BaseModel):
    created_at: datetime = Field(validation_alias="createdAt")


class GqlBlob(BaseModel):
    text: str | None = None


class GqlProfileRepository(BaseModel):
    """The user's `<login>/<login>` repository, which holds the profile README."""

    readme: GqlBlob | None = Field(default=None, validation_alias="object")


class GqlContributionCalendar(BaseModel):
    total_contributions: int = Field(validation_alias="totalContributions")


class GqlContributionsCollection(BaseModel):
    contribution_calendar: GqlContributionCalendar = Field(validation_alias="contributionCalendar")


class GqlUser(BaseModel):
    name: str | None = None
    bio: str | None = None
    location: str | None = None
    avatar_url: str | None = Field(default=None, validation_alias="avatarUrl")
    url: str | None = None
    followers: TotalCount
    following: TotalCount
    profile_repository: GqlProfileRepository | None = Field(default=None, validation_alias="repository")
    repositories: CountedNodes[GqlRepository]
    contributions_collection: GqlContributionsCollection = Field(validation_alias="contributionsCollection")
    pull_requests: CountedNodes[GqlCreatedAt] = Field(validation_alias="pullRequests")
    issues: CountedNodes[GqlCreatedAt]
    repositories_contributed_to: TotalCount = Field(validation_alias="repositoriesContributedTo")

    @property
    def readme(self) -> str | None:
        if self.profile_repository and self.profile_repository.readme:
            return self.profile_repository.readme.text
        return None


class GqlGetUserProfile(BaseGqlQuery):
    user: GqlUser | None = None

    @staticmethod
    @override
    def graphql_query() -> str:
        query = """
            query GqlGetUserProfile($login: String!, $from: DateTime!, $limit: Int!) {
                user(login: $login) {
                    name
                    bio
                    location
                    avatarUrl
                    url
                    followers {
                        totalCount
                    }
                    following {
                        totalCount
                    }
                    repository(name: $login) {
                        object(expression: "HEAD:README.md") {
                            ... on Blob {
                                text
                            }
                        }
                    }
                    repositories(first: $limit, orderBy: {field: UPDATED_AT, direction: DESC}) {
                        totalCount
                        nodes {
                            name
                            description
                            stargazerCount
                            primaryLanguage {
                                name
                            }
                            url
                            updatedAt
                        }
                    }
                    contributionsCollection(from: $from) {
                        contributionCalendar {
                            totalContributions
                        }
                    }
                    pullRequests(first: $limit, states: MERGED, orderBy: {field: UPDATED_AT, direction: DESC}) {
                        totalCount
                        nodes {
                            createdAt
                        }
                    }
                    issues(last: $limit, states: CLOSED) {
                        totalCount
                        nodes {
                            createdAt
                        }
                    }
                    repositoriesContributedTo(first: $limit, contributionTypes: [COMMIT, ISSUE, PULL_REQUEST, REPOSITORY]) {
                        totalCount
                    }
                }
            }
            """
        return dedent(text=query)

    @staticmethod
    @override
    def to_graphql_query_variables(login: str, since: datetime, limit: int = MAX_PROFILE_NODES) -> dict[str, Any]:
        return {"login": login, "from": since.isoformat(), "limit": limit}
