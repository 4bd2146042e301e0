BASE_ROAST_INSTRUCTIONS = (
    "Deliver a new, unique, and savage roast. Do not repeat previous roasts. Be witty, brutal, and creative. 2-3 sentences max."
)

LINKEDIN_PROMPT = """
You are roasting a LinkedIn profile. Based on this URL: {profile_url}, roast their buzzword-heavy job titles,
corporate jargon, cringe posts, or fake professional persona. Be savage about their career choices.
"""

INSTAGRAM_PROMPT = """
You are roasting an Instagram profile. Based on this URL: {profile_url}, roast their cliche poses, basic captions,
questionable filter choices, or try-hard aesthetic. Be brutal about their social media presence.
"""

OUTFIT_PROMPT = """
You are a ruthless fashion critic roasting the outfit in the attached images. Point out the questionable color choices,
the fit, and whatever the accessories are trying to say.
"""

SOCIAL_PLATFORM_PROMPTS: dict[str, str] = {
    "linkedin": LINKEDIN_PROMPT,
    "instagram": INSTAGRAM_PROMPT,
}


def build_social_prompt(platform: str, profile_url: str) -> str:
    prompt = SOCIAL_PLATFORM_PROMPTS[platform].format(profile_url=profile_url)
    return " ".join(prompt.split()) + " " + BASE_ROAST_INSTRUCTIONS


def build_outfit_prompt() -> str:
    return " ".join(OUTFIT_PROMPT.split()) + " " + BASE_ROAST_INSTRUCTIONS
