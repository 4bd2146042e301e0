from collections.abc import Callable
from datetime import timedelta

from github_profile_roast.clients.models.github import Profile

STALE_REPOSITORY_WINDOW = timedelta(days=180)
MINIMUM_README_LENGTH = 100
TOP_REPOSITORIES_LIMIT = 5

NO_BIO = "No bio (can't even describe themselves)"
NO_LOCATION = "Unknown (hiding in shame)"

InsightRule = Callable[[Profile], str | None]


def missing_bio(profile: Profile) -> str | None:
    if not profile.bio.strip():
        return "has no bio (can't even describe themselves)"
    return None


def missing_location(profile: Profile) -> str | None:
    if not profile.location.strip():
        return "too ashamed to share their location"
    return None


def missing_display_name(profile: Profile) -> str | None:
    if not profile.name.strip() or profile.name == profile.username:
        return "couldn't even set a proper name"
    return None


def following_outnumbers_followers(profile: Profile) -> str | None:
    if profile.following > 10 * profile.followers:
        return "follows way more people than follow them back (desperate for attention)"
    return None


def few_followers(profile: Profile) -> str | None:
    if profile.followers < 10:
        return "has almost no followers (nobody cares about their code)"
    return None


def follows_everyone(profile: Profile) -> str | None:
    if profile.following > 1000:
        return "follows everyone hoping for follow-backs (social media desperation)"
    return None


def few_stars(profile: Profile) -> str | None:
    total_stars = sum(repository.stars for repository in profile.repositories)
    if total_stars / max(len(profile.repositories), 1) < 1:
        return "repositories have almost no stars (code nobody wants)"
    return None


def few_repositories(profile: Profile) -> str | None:
    if len(profile.repositories) < 5:
        return "barely has any repositories (not actually coding)"
    return None


def single_language(profile: Profile) -> str | None:
    languages = {repository.language for repository in profile.repositories if repository.language}
    if len(languages) == 1:
        return f"only codes in {languages.pop()} (one-trick pony)"
    return None


def stale_repositories(profile: Profile) -> str | None:
    cutoff = profile.fetched_at - STALE_REPOSITORY_WINDOW
    if not any(repository.updated_at and repository.updated_at > cutoff for repository in profile.repositories):
        return "hasn't updated any repositories in months (gave up coding)"
    return None


def few_contributions(profile: Profile) -> str | None:
    if isinstance(profile.total_contributions, int) and profile.total_contributions < 100:
        return "barely contributes to anything (lazy developer)"
    return None


def few_repositories_contributed_to(profile: Profile) -> str | None:
    if isinstance(profile.repositories_contributed_to, int) and profile.repositories_contributed_to < 5:
        return "doesn't contribute to other projects (antisocial coder)"
    return None


def unsupported_full_stack_claim(profile: Profile) -> str | None:
    if "full stack" in profile.bio.lower() and len(profile.repositories) < 10:
        return "claims to be 'full stack' but has no projects to prove it"
    return None


def cliche_bio(profile: Profile) -> str | None:
    bio = profile.bio.lower()
    if "passionate" in bio or "love coding" in bio:
        return "uses cliché buzzwords in bio (unoriginal personality)"
    return None


def still_learning(profile: Profile) -> str | None:
    bio = profile.bio.lower()
    if "learning" in bio or "student" in bio:
        return "still learning basics (amateur hour)"
    return None


def missing_readme(profile: Profile) -> str | None:
    if not profile.readme:
        return "doesn't even have a profile README (can't market themselves)"
    return None


def short_readme(profile: Profile) -> str | None:
    if profile.readme and len(profile.readme) < MINIMUM_README_LENGTH:
        return "profile README is pathetically short (no effort)"
    return None


def missing_social_links(profile: Profile) -> str | None:
    if not profile.social_links:
        return "has no social media links (antisocial or ashamed)"
    return None


COMPLETENESS_RULES: list[InsightRule] = [missing_bio, missing_location, missing_display_name]
SOCIAL_RATIO_RULES: list[InsightRule] = [following_outnumbers_followers, few_followers, follows_everyone]
REPOSITORY_QUALITY_RULES: list[InsightRule] = [few_stars, few_repositories, single_language, stale_repositories]
ACTIVITY_VOLUME_RULES: list[InsightRule] = [few_contributions, few_repositories_contributed_to]
BIO_CONTENT_RULES: list[InsightRule] = [unsupported_full_stack_claim, cliche_bio, still_learning]
SELF_PROMOTION_RULES: list[InsightRule] = [missing_readme, short_readme, missing_social_links]


def get_rules(profile: Profile) -> list[InsightRule]:
    """The rules that apply to the profile, in the order their insights are read. Activity rules need an enhanced profile."""
    activity_rules = ACTIVITY_VOLUME_RULES if profile.is_enhanced else []

    return [
        *COMPLETENESS_RULES,
        *SOCIAL_RATIO_RULES,
        *REPOSITORY_QUALITY_RULES,
        *activity_rules,
        *BIO_CONTENT_RULES,
        *SELF_PROMOTION_RULES,
    ]


def derive_insights(profile: Profile) -> list[str]:
    return [insight for rule in get_rules(profile) if (insight := rule(profile))]


def format_repositories(profile: Profile, limit: int = TOP_REPOSITORIES_LIMIT) -> str:
    lines: list[str] = []

    for repository in profile.repositories[:limit]:
        description = f'- "{repository.description}"' if repository.description else "(no description)"
        lines.append(f'- "{repository.name}": {repository.stars} stars, {repository.language or "No language"} {description}')

    return "\n".join(lines)


def build_narrative_prompt(profile: Profile) -> str:
    """The roast prompt for a fetched profile: its metrics, the derived insights, and its top repositories."""

    insights = derive_insights(profile)

    bio = profile.bio or NO_BIO
    location = profile.location or NO_LOCATION

    lines: list[str] = [
        "You are roasting a GitHub profile. Here's the devastating data about this developer:",
        "",
        f"Username: {profile.username}",
        f"Name: {profile.name}",
        f'Bio: "{bio}"',
        f"Location: {location}",
        f"Followers: {profile.followers} | Following: {profile.following}",
        f"Public Repos: {profile.public_repos}",
        f"Total Contributions (last year): {profile.total_contributions}",
        f"Pull Requests Merged: {profile.pull_requests_merged}",
        f"Issues Closed: {profile.issues_closed}",
        "",
        f"DEVASTATING INSIGHTS: {', '.join(insights) or 'none, somehow'}",
        "",
    ]

    if profile.repositories:
        lines.extend(["TOP REPOSITORIES ANALYSIS:", format_repositories(profile), ""])

    lines.append(
        "Based on this pathetic GitHub profile data, deliver a new, unique, and absolutely savage roast. "
        "Use the specific metrics, repository names, bio content, and social patterns to create a personalized destruction. "
        "Be brutal about their coding skills, project quality, social presence, and developer credibility. "
        "Make it cutting, specific, and devastatingly accurate. 2-3 sentences maximum."
    )

    return "\n".join(lines)


def build_basic_prompt(username: str, profile_url: str) -> str:
    """The roast prompt used when no profile could be fetched."""

    return (
        f"You are roasting a GitHub profile. Based on this URL: {profile_url} for user {username}, "
        "roast their coding skills, commit messages, repository names, or lack thereof. "
        "Focus on typical GitHub fails like empty repos, terrible commit messages, copying tutorials, or having no meaningful projects. "
        "Be savage about their developer credibility and coding abilities. Deliver a new, unique, and brutal roast. "
        "Do not repeat previous roasts. Be witty, cutting, and creative. 2-3 sentences maximum."
    )
