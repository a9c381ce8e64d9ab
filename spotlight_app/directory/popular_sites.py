"""
================================================================================
Spotlight v1.0 - Curated Site Directory
================================================================================
Static domain -> display-name table for popular websites, plus fuzzy
domain completion for partially typed input ("squaresp" -> squarespace.com).

Completion tiers (highest first):
  1. start    - first domain label starts with the partial
                score 65 - 0.1 * (len(domain) - len(partial)), floor 63
  2. contains - first domain label contains the partial      score 63
  3. name     - display name contains the partial            score 62
================================================================================
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Optional, Dict


# =============================================================================
# CURATED TABLE
# =============================================================================

_POPULAR_SITES: Dict[str, str] = {
    # Search & Productivity
    "google.com": "Google",
    "bing.com": "Bing",
    "duckduckgo.com": "DuckDuckGo",
    "yahoo.com": "Yahoo",
    "chatgpt.com": "ChatGPT",
    "openai.com": "OpenAI",
    "anthropic.com": "Anthropic",
    "claude.ai": "Claude",
    "copilot.microsoft.com": "Copilot",
    "bard.google.com": "Bard",
    "perplexity.ai": "Perplexity",

    # Social Media
    "facebook.com": "Facebook",
    "meta.com": "Meta",
    "twitter.com": "Twitter",
    "x.com": "X",
    "linkedin.com": "LinkedIn",
    "instagram.com": "Instagram",
    "tiktok.com": "TikTok",
    "snapchat.com": "Snapchat",
    "pinterest.com": "Pinterest",
    "tumblr.com": "Tumblr",
    "reddit.com": "Reddit",
    "discord.com": "Discord",
    "telegram.org": "Telegram",
    "whatsapp.com": "WhatsApp",
    "signal.org": "Signal",

    # Tech & Development
    "github.com": "GitHub",
    "gitlab.com": "GitLab",
    "bitbucket.org": "Bitbucket",
    "stackoverflow.com": "Stack Overflow",
    "stackexchange.com": "Stack Exchange",
    "codepen.io": "CodePen",
    "jsfiddle.net": "JSFiddle",
    "codesandbox.io": "CodeSandbox",
    "replit.com": "Replit",
    "vercel.com": "Vercel",
    "netlify.com": "Netlify",
    "heroku.com": "Heroku",
    "aws.amazon.com": "AWS",
    "cloud.google.com": "Google Cloud",
    "azure.microsoft.com": "Azure",
    "digitalocean.com": "DigitalOcean",

    # Video & Entertainment
    "youtube.com": "YouTube",
    "netflix.com": "Netflix",
    "hulu.com": "Hulu",
    "disneyplus.com": "Disney+",
    "primevideo.com": "Prime Video",
    "hbomax.com": "HBO Max",
    "twitch.tv": "Twitch",
    "vimeo.com": "Vimeo",
    "dailymotion.com": "Dailymotion",
    "spotify.com": "Spotify",
    "apple.com/music": "Apple Music",
    "music.youtube.com": "YouTube Music",
    "soundcloud.com": "SoundCloud",
    "pandora.com": "Pandora",

    # Shopping & E-commerce
    "amazon.com": "Amazon",
    "ebay.com": "eBay",
    "etsy.com": "Etsy",
    "walmart.com": "Walmart",
    "target.com": "Target",
    "bestbuy.com": "Best Buy",
    "costco.com": "Costco",
    "alibaba.com": "Alibaba",
    "aliexpress.com": "AliExpress",
    "shopify.com": "Shopify",
    "squarespace.com": "Squarespace",
    "wix.com": "Wix",
    "wordpress.com": "WordPress",

    # News & Media
    "cnn.com": "CNN",
    "bbc.com": "BBC",
    "nytimes.com": "New York Times",
    "washingtonpost.com": "Washington Post",
    "theguardian.com": "The Guardian",
    "reuters.com": "Reuters",
    "ap.org": "Associated Press",
    "npr.org": "NPR",
    "foxnews.com": "Fox News",
    "msnbc.com": "MSNBC",
    "bloomberg.com": "Bloomberg",
    "wsj.com": "Wall Street Journal",
    "economist.com": "The Economist",
    "techcrunch.com": "TechCrunch",
    "theverge.com": "The Verge",
    "ars-technica.com": "Ars Technica",

    # Professional & Business
    "microsoft.com": "Microsoft",
    "apple.com": "Apple",
    "adobe.com": "Adobe",
    "salesforce.com": "Salesforce",
    "atlassian.com": "Atlassian",
    "slack.com": "Slack",
    "zoom.us": "Zoom",
    "teams.microsoft.com": "Microsoft Teams",
    "meet.google.com": "Google Meet",
    "notion.so": "Notion",
    "airtable.com": "Airtable",
    "trello.com": "Trello",
    "asana.com": "Asana",
    "monday.com": "Monday.com",
    "dropbox.com": "Dropbox",
    "box.com": "Box",
    "onedrive.live.com": "OneDrive",
    "drive.google.com": "Google Drive",

    # Design & Creative
    "figma.com": "Figma",
    "sketch.com": "Sketch",
    "canva.com": "Canva",
    "behance.net": "Behance",
    "dribbble.com": "Dribbble",
    "unsplash.com": "Unsplash",
    "pexels.com": "Pexels",
    "shutterstock.com": "Shutterstock",
    "gettyimages.com": "Getty Images",

    # Finance & Payments
    "paypal.com": "PayPal",
    "venmo.com": "Venmo",
    "stripe.com": "Stripe",
    "square.com": "Square",
    "coinbase.com": "Coinbase",
    "binance.com": "Binance",
    "robinhood.com": "Robinhood",
    "etrade.com": "E*TRADE",
    "fidelity.com": "Fidelity",
    "schwab.com": "Charles Schwab",

    # Travel & Transportation
    "expedia.com": "Expedia",
    "booking.com": "Booking.com",
    "airbnb.com": "Airbnb",
    "uber.com": "Uber",
    "lyft.com": "Lyft",
    "maps.google.com": "Google Maps",
    "waze.com": "Waze",
    "tripadvisor.com": "TripAdvisor",
    "kayak.com": "Kayak",
    "priceline.com": "Priceline",

    # Education & Learning
    "coursera.org": "Coursera",
    "udemy.com": "Udemy",
    "edx.org": "edX",
    "khanacademy.org": "Khan Academy",
    "duolingo.com": "Duolingo",
    "skillshare.com": "Skillshare",
    "masterclass.com": "MasterClass",
    "pluralsight.com": "Pluralsight",
    "linkedin.com/learning": "LinkedIn Learning",

    # Email & Communication
    "gmail.com": "Gmail",
    "outlook.com": "Outlook",
    "mail.yahoo.com": "Yahoo Mail",
    "protonmail.com": "ProtonMail",
    "tutanota.com": "Tutanota",

    # Reference & Information
    "wikipedia.org": "Wikipedia",
    "wikimedia.org": "Wikimedia",
    "archive.org": "Internet Archive",
    "dictionary.com": "Dictionary.com",
    "merriam-webster.com": "Merriam-Webster",
    "translate.google.com": "Google Translate",
    "deepl.com": "DeepL",

    # Gaming
    "steam.com": "Steam",
    "epicgames.com": "Epic Games",
    "battle.net": "Battle.net",
    "xbox.com": "Xbox",
    "playstation.com": "PlayStation",
    "nintendo.com": "Nintendo",
    "roblox.com": "Roblox",
    "minecraft.net": "Minecraft",

    # Health & Fitness
    "webmd.com": "WebMD",
    "mayoclinic.org": "Mayo Clinic",
    "healthline.com": "Healthline",
    "fitbit.com": "Fitbit",
    "myfitnesspal.com": "MyFitnessPal",
    "strava.com": "Strava",
}

POPULAR_SITES = MappingProxyType(_POPULAR_SITES)


# =============================================================================
# MATCH SCORING
# =============================================================================

MATCH_START = "start"
MATCH_CONTAINS = "contains"
MATCH_NAME = "name"

START_SCORE = 65
CONTAINS_SCORE = 63
NAME_SCORE = 62
LENGTH_PENALTY = 0.1

_TIER_ORDER = {MATCH_START: 0, MATCH_CONTAINS: 1, MATCH_NAME: 2}


@dataclass(frozen=True)
class DomainMatch:
    """A curated domain that completes a partial input."""
    domain: str
    display_name: str
    score: float
    match_type: str


def lookup(domain: str) -> Optional[str]:
    """Exact display-name lookup (keys are stored lower-case)."""
    return POPULAR_SITES.get(domain)


def get_all_domains() -> List[str]:
    return list(POPULAR_SITES.keys())


def start_match_score(domain: str, partial: str) -> float:
    """Prefix matches lose a little per extra character, never below contains."""
    score = START_SCORE - (len(domain) - len(partial)) * LENGTH_PENALTY
    return max(CONTAINS_SCORE, round(score, 2))


def fuzzy_domain_match(partial: Optional[str], max_results: int = 10) -> List[DomainMatch]:
    """
    Complete a partially typed domain against the curated table.

    Args:
        partial: Raw user input (case-insensitive)
        max_results: Maximum matches to return

    Returns:
        Matches sorted by tier, then score; equal entries keep table order
    """
    if not partial:
        return []
    partial = partial.strip().lower()
    if not partial:
        return []

    matches = []
    for domain, display_name in POPULAR_SITES.items():
        first_label = domain.split('.')[0]

        if first_label.startswith(partial):
            matches.append(DomainMatch(domain, display_name, start_match_score(domain, partial), MATCH_START))
        elif partial in first_label:
            matches.append(DomainMatch(domain, display_name, CONTAINS_SCORE, MATCH_CONTAINS))
        elif partial in display_name.lower():
            matches.append(DomainMatch(domain, display_name, NAME_SCORE, MATCH_NAME))

    matches.sort(key=lambda m: (_TIER_ORDER[m.match_type], -m.score))
    return matches[:max_results]
