from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from inline_snapshot import snapshot

from github_profile_roast.clients.models.github import Profile, ProfileRepository, ProfileTier, SocialLink
from github_profile_roast.insights import (
    ACTIVITY_VOLUME_RULES,
    build_basic_prompt,
    build_narrative_prompt,
    derive_insights,
    format_repositories,
    get_rules,
)

FETCHED_AT = datetime(2025, 6, 1, tzinfo=UTC)


def repository(name: str, days_old: int = 1, stars: int = 0, language: str | None = "Python", description: str | None = None):
    return ProfileRepository(
        name=name,
        description=description,
        stars=stars,
        language=language,
        url=f"https://github.com/octocat/{name}",
        updated_at=FETCHED_AT - timedelta(days=days_old),
    )


def basic_profile(**overrides: Any) -> Profile:  # pyright: ignore[reportAny]
    fields: dict[str, Any] = {
        "username": "octocat",
        "name": "Octo Cat",
        "bio": "Building things.",
        "location": "San Francisco",
        "profile_url": "https://github.com/octocat",
        "followers": 50,
        "following": 20,
        "public_repos": 6,
        "repositories": [repository(f"project-{i}", stars=3, language=language) for i, language in enumerate(["Python", "Go"] * 3)],
        "tier": ProfileTier.BASIC,
        "fetched_at": FETCHED_AT,
    }
    return Profile(**(fields | overrides))  # pyright: ignore[reportAny]


def enhanced_profile(**overrides: Any) -> Profile:  # pyright: ignore[reportAny]
    fields: dict[str, Any] = {
        "total_contributions": 500,
        "repositories_contributed_to": 12,
        "pull_requests_merged": 40,
        "issues_closed": 10,
        "social_links": [SocialLink(provider="twitter", url="https://twitter.com/octocat")],
        "readme": "# Hello\n" + "I build developer tools and write about them. " * 5,
        "tier": ProfileTier.ENHANCED,
    }
    return basic_profile(**(fields | overrides))


class TestProfileModel:
    def test_basic_profile_rejects_activity(self):
        with pytest.raises(ValueError, match="activity metrics"):
            _ = basic_profile(total_contributions=5)

    def test_enhanced_profile_requires_activity(self):
        with pytest.raises(ValueError, match="every activity metric"):
            _ = enhanced_profile(issues_closed="Unknown")

    def test_social_links_are_deduplicated(self):
        profile = enhanced_profile(
            social_links=[
                SocialLink(provider="twitter", url="https://twitter.com/octocat"),
                SocialLink(provider="twitter", url="https://twitter.com/octocat"),
                SocialLink(provider="linkedin", url="https://www.linkedin.com/in/octocat"),
            ]
        )

        assert [social_link.provider for social_link in profile.social_links] == ["twitter", "linkedin"]


class TestDeriveInsights:
    def test_basic_profile_only_flags_self_promotion(self):
        assert derive_insights(basic_profile()) == snapshot(
            [
                "doesn't even have a profile README (can't market themselves)",
                "has no social media links (antisocial or ashamed)",
            ]
        )

    def test_healthy_enhanced_profile(self):
        assert derive_insights(enhanced_profile()) == []

    def test_is_deterministic(self):
        profile = enhanced_profile(bio="", followers=0, following=400, repositories=[])

        assert derive_insights(profile) == derive_insights(profile)

    def test_empty_basic_profile(self):
        profile = basic_profile(name="octocat", bio="", location="", followers=0, following=0, public_repos=0, repositories=[])

        assert derive_insights(profile) == snapshot(
            [
                "has no bio (can't even describe themselves)",
                "too ashamed to share their location",
                "couldn't even set a proper name",
                "has almost no followers (nobody cares about their code)",
                "repositories have almost no stars (code nobody wants)",
                "barely has any repositories (not actually coding)",
                "hasn't updated any repositories in months (gave up coding)",
                "doesn't even have a profile README (can't market themselves)",
                "has no social media links (antisocial or ashamed)",
            ]
        )

    def test_activity_rules_need_an_enhanced_profile(self):
        assert not set(ACTIVITY_VOLUME_RULES) & set(get_rules(basic_profile()))
        assert set(ACTIVITY_VOLUME_RULES) <= set(get_rules(enhanced_profile()))

    def test_low_activity(self):
        profile = enhanced_profile(total_contributions=99, repositories_contributed_to=4)

        assert derive_insights(profile) == [
            "barely contributes to anything (lazy developer)",
            "doesn't contribute to other projects (antisocial coder)",
        ]

    @pytest.mark.parametrize("rule", ACTIVITY_VOLUME_RULES)
    def test_activity_rules_skip_unknown_counts(self, rule: Callable[[Profile], str | None]):
        assert rule(basic_profile()) is None

    def test_social_ratio(self):
        profile = enhanced_profile(followers=5, following=1500)

        assert derive_insights(profile) == [
            "follows way more people than follow them back (desperate for attention)",
            "has almost no followers (nobody cares about their code)",
            "follows everyone hoping for follow-backs (social media desperation)",
        ]

    def test_following_exactly_ten_times_followers(self):
        assert derive_insights(enhanced_profile(followers=10, following=100)) == []

    def test_single_language(self):
        profile = enhanced_profile(repositories=[repository(f"rusty-{i}", stars=2, language="Rust") for i in range(5)])

        assert derive_insights(profile) == ["only codes in Rust (one-trick pony)"]

    def test_stale_repositories_use_the_fetch_time(self):
        profile = enhanced_profile(repositories=[repository(f"old-{i}", days_old=181 + i, stars=2, language=f"L{i}") for i in range(5)])

        assert derive_insights(profile) == ["hasn't updated any repositories in months (gave up coding)"]

    def test_bio_content(self):
        profile = enhanced_profile(bio="Passionate Full Stack developer, still learning")

        assert derive_insights(profile) == [
            "claims to be 'full stack' but has no projects to prove it",
            "uses cliché buzzwords in bio (unoriginal personality)",
            "still learning basics (amateur hour)",
        ]

    def test_short_readme(self):
        assert derive_insights(enhanced_profile(readme="# Hi")) == ["profile README is pathetically short (no effort)"]


class TestPrompts:
    def test_format_repositories(self):
        profile = basic_profile(
            repositories=[
                repository("roast-bot", stars=12, language="TypeScript", description="Roasts people"),
                repository("dotfiles", language=None),
            ]
        )

        assert format_repositories(profile) == snapshot(
            """\
- "roast-bot": 12 stars, TypeScript - "Roasts people"
- "dotfiles": 0 stars, No language (no description)\
"""
        )

    def test_format_repositories_limits_to_top_five(self):
        assert len(format_repositories(basic_profile()).splitlines()) == 5

    def test_narrative_prompt(self):
        profile = enhanced_profile(bio="", followers=1, following=30, repositories=[repository("hello-world", language="C")])

        assert build_narrative_prompt(profile) == snapshot(
            """\
You are roasting a GitHub profile. Here's the devastating data about this developer:

Username: octocat
Name: Octo Cat
Bio: "No bio (can't even describe themselves)"
Location: San Francisco
Followers: 1 | Following: 30
Public Repos: 6
Total Contributions (last year): 500
Pull Requests Merged: 40
Issues Closed: 10

DEVASTATING INSIGHTS: has no bio (can't even describe themselves), follows way more people than follow them back (desperate for attention), has almost no followers (nobody cares about their code), repositories have almost no stars (code nobody wants), barely has any repositories (not actually coding), only codes in C (one-trick pony)

TOP REPOSITORIES ANALYSIS:
- "hello-world": 0 stars, C (no description)

Based on this pathetic GitHub profile data, deliver a new, unique, and absolutely savage roast. Use the specific metrics, repository names, bio content, and social patterns to create a personalized destruction. Be brutal about their coding skills, project quality, social presence, and developer credibility. Make it cutting, specific, and devastatingly accurate. 2-3 sentences maximum.\
"""
        )

    def test_narrative_prompt_for_basic_profile_without_repositories(self):
        prompt = build_narrative_prompt(basic_profile(repositories=[]))

        assert "Total Contributions (last year): Unknown" in prompt
        assert "Pull Requests Merged: Unknown" in prompt
        assert "TOP REPOSITORIES ANALYSIS" not in prompt
        assert "barely has any repositories" in prompt

    def test_narrative_prompt_with_no_insights(self):
        assert "DEVASTATING INSIGHTS: none, somehow" in build_narrative_prompt(enhanced_profile())

    def test_basic_prompt(self):
        prompt = build_basic_prompt(username="octocat", profile_url="https://github.com/octocat")

        assert "https://github.com/octocat" in prompt
        assert "for user octocat" in prompt
        assert "GitHub" in prompt
