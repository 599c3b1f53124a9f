"""Default category rule table.

Order is significant: classification returns the first rule that matches, so
reordering entries changes results. Bump RULES_VERSION whenever the table
changes.
"""

import re

from tab_shepherd.models import CategoryRule

RULES_VERSION = "2024.1"

UNCATEGORIZED = "Uncategorized"
DEFAULT_ICON = "📋"
DEFAULT_COLOR = "#6B7280"


def _patterns(*sources: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(s, re.IGNORECASE) for s in sources)


DEFAULT_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        name="Development",
        icon="💻",
        color="#10B981",
        keywords=(
            # Repositories
            "github.com", "gitlab.com", "bitbucket.org", "codeberg.org",
            # Q&A
            "stackoverflow.com", "stackexchange.com", "serverfault.com",
            # Documentation
            "developer.mozilla.org", "docs.microsoft.com", "docs.aws.amazon.com",
            "cloud.google.com/docs", "docs.docker.com", "kubernetes.io", "reactjs.org",
            "vuejs.org", "angular.io", "svelte.dev", "nodejs.org", "python.org",
            "golang.org", "rust-lang.org",
            # Platforms
            "dev.to", "hashnode.com", "codepen.io", "jsfiddle.net", "replit.com",
            "codesandbox.io", "glitch.com", "stackblitz.com", "vercel.com", "netlify.com",
            "heroku.com", "railway.app",
            # Local
            "localhost", "127.0.0.1", "local.", "dev.",
            # Registries
            "npmjs.com", "pypi.org", "packagist.org", "crates.io", "nuget.org",
            "maven.apache.org",
        ),
        patterns=_patterns(
            r"docs?\.", r"api\.", r"localhost", r"127\.0\.0\.1", r":\d{4}",
            r"dev\.", r"staging\.", r"test\.",
        ),
    ),
    CategoryRule(
        name="AI & Machine Learning",
        icon="🤖",
        color="#FF6B6B",
        keywords=(
            "chat.openai.com", "chatgpt.com", "claude.ai", "anthropic.com", "bard.google.com",
            "bing.com/chat", "character.ai", "poe.com", "perplexity.ai", "you.com", "phind.com",
            "huggingface.co", "replicate.com", "runpod.io", "colab.research.google.com",
            "kaggle.com", "paperswithcode.com", "arxiv.org",
            "midjourney.com", "stability.ai", "dalle.openai.com", "runway.ml", "luma.ai",
            "elevenlabs.io", "murf.ai", "jasper.ai", "copy.ai", "writesonic.com",
            "grammarly.com", "notion.ai", "github.com/copilot", "leonardo.ai", "photopea.com",
            "remove.bg", "loom.ai", "descript.com", "synthesia.io", "tome.app",
            "aibreakfast.com", "towards-ai.com", "techcrunch.com/tag/artificial-intelligence",
        ),
        patterns=_patterns(
            r"\bai\b", r"artificial.intelligence", r"machine.learning", r"neural.network",
            r"gpt", r"llm",
        ),
    ),
    CategoryRule(
        name="Social & Communication",
        icon="📱",
        color="#F59E0B",
        keywords=(
            "twitter.com", "x.com", "facebook.com", "instagram.com", "linkedin.com",
            "tiktok.com", "snapchat.com", "pinterest.com", "glassdoor.com", "indeed.com",
            "angel.co", "wellfound.com", "reddit.com", "discord.com", "telegram.org",
            "whatsapp.com", "signal.org", "mastodon.social", "threads.net", "clubhouse.com",
            "bereal.com", "vero.co", "minds.com", "gab.com", "tinder.com", "bumble.com",
            "hinge.co", "match.com", "zoom.us", "meet.google.com", "teams.microsoft.com",
            "slack.com", "discord.gg",
        ),
        patterns=_patterns(r"social", r"chat", r"message", r"community"),
    ),
    CategoryRule(
        name="News & Information",
        icon="📰",
        color="#6366F1",
        keywords=(
            "cnn.com", "bbc.com", "nytimes.com", "washingtonpost.com", "reuters.com",
            "ap.org", "bloomberg.com", "wsj.com", "theguardian.com", "usatoday.com",
            "npr.org", "pbs.org", "techcrunch.com", "theverge.com", "ars-technica.com",
            "wired.com", "engadget.com", "gizmodo.com", "mashable.com", "venturebeat.com",
            "news.ycombinator.com", "slashdot.org", "digg.com", "flipboard.com",
            "pocket.com", "instapaper.com", "medium.com", "substack.com", "newsletter.",
        ),
        patterns=_patterns(r"news", r"breaking", r"headlines", r"journal", r"times", r"post"),
    ),
    CategoryRule(
        name="Shopping & E-commerce",
        icon="🛒",
        color="#EF4444",
        keywords=(
            "amazon.com", "walmart.com", "target.com", "costco.com", "bestbuy.com",
            "homedepot.com", "lowes.com", "macys.com", "ebay.com", "etsy.com", "mercari.com",
            "poshmark.com", "facebook.com/marketplace", "offerup.com", "craigslist.org",
            "aliexpress.com", "alibaba.com", "wish.com", "temu.com", "shein.com", "zaful.com",
            "banggood.com", "nike.com", "adidas.com", "zara.com", "h&m.com", "uniqlo.com",
            "gap.com", "oldnavy.com", "lululemon.com", "athleta.com", "patagonia.com",
            "northface.com", "asos.com", "boohoo.com", "prettylittlething.com", "revolve.com",
            "ssense.com", "slickdeals.net", "groupon.com", "woot.com", "overstock.com",
            "dealfinder.", "coupon", "promo",
        ),
        patterns=_patterns(
            r"shop", r"store", r"buy", r"cart", r"checkout", r"deals?", r"sale", r"coupon",
            r"price",
        ),
    ),
    CategoryRule(
        name="Media & Entertainment",
        icon="🎬",
        color="#8B5CF6",
        keywords=(
            "youtube.com", "netflix.com", "hulu.com", "disneyplus.com", "amazon.com/prime",
            "hbomax.com", "paramount.com", "peacocktv.com", "crunchyroll.com",
            "funimation.com", "tubi.tv", "roku.com", "appletv.com", "discovery.com",
            "starz.com", "showtime.com", "amc.com", "fxnetworks.com", "spotify.com",
            "apple.com/music", "youtube.com/music", "soundcloud.com", "pandora.com",
            "deezer.com", "tidal.com", "bandcamp.com", "last.fm", "audiomack.com",
            "twitch.tv", "steam.com", "epic.games", "origin.com", "battle.net", "xbox.com",
            "playstation.com", "nintendo.com", "itch.io", "gog.com", "humble.com",
            "imdb.com", "rottentomatoes.com", "metacritic.com", "entertainment.",
            "variety.com", "hollywood.com", "podcasts.apple.com", "podcasts.google.com",
            "anchor.fm",
        ),
        patterns=_patterns(
            r"watch", r"stream", r"play", r"video", r"music", r"game", r"gaming",
            r"entertainment",
        ),
    ),
    CategoryRule(
        name="Work & Productivity",
        icon="💼",
        color="#3B82F6",
        keywords=(
            # google.com/microsoft.com/yahoo.com/apple.com cover their regional domains
            "gmail.com", "google.com", "outlook.com", "microsoft.com", "yahoo.com",
            "protonmail.com", "tutanota.com", "calendly.com", "acuityscheduling.com",
            "when2meet.com", "doodle.com", "asana.com", "trello.com", "monday.com",
            "clickup.com", "notion.so", "airtable.com", "basecamp.com", "atlassian.com",
            "dropbox.com", "box.com", "icloud.com", "apple.com", "figma.com", "sketch.com",
            "adobe.com", "canva.com", "miro.com", "mural.co", "lucidchart.com",
            "quickbooks.com", "xero.com", "freshbooks.com", "stripe.com", "paypal.com",
            "square.com",
        ),
        patterns=_patterns(
            r"work", r"office", r"business", r"productivity", r"project", r"task", r"meeting",
        ),
    ),
    CategoryRule(
        name="Research & Learning",
        icon="📚",
        color="#059669",
        keywords=(
            "coursera.org", "udemy.com", "edx.org", "khanacademy.org", "pluralsight.com",
            "skillshare.com", "masterclass.com", "linkedin.com/learning", "udacity.com",
            "codecademy.com", "wikipedia.org", "scholar.google.com", "jstor.org",
            "researchgate.net", "academia.edu", "pubmed.ncbi.nlm.nih.gov",
            "sciencedirect.com", "springer.com", "nature.com", "duolingo.com", "babbel.com",
            "rosettastone.com", "busuu.com", "lingoda.com", "italki.com", "dictionary.com",
            "merriam-webster.com", "thesaurus.com", "translate.google.com", "deepl.com",
            "grammarly.com", ".edu", ".ac.", "library.", "archive.org",
        ),
        patterns=_patterns(
            r"learn", r"study", r"course", r"tutorial", r"guide", r"how.?to", r"research",
            r"academic", r"\.edu",
        ),
    ),
    CategoryRule(
        name="Finance & Banking",
        icon="💰",
        color="#DC2626",
        keywords=(
            "bankofamerica.com", "chase.com", "wellsfargo.com", "citi.com", "usbank.com",
            "pnc.com", "truist.com", "capitalone.com", "robinhood.com", "etrade.com",
            "schwab.com", "fidelity.com", "vanguard.com", "tdameritrade.com", "webull.com",
            "coinbase.com", "binance.com", "kraken.com", "gemini.com", "crypto.com",
            "blockchain.com", "coinmarketcap.com", "coingecko.com", "mint.com", "ynab.com",
            "personalcapital.com", "creditkarma.com", "nerdwallet.com", "bankrate.com",
            "experian.com", "creditscorecard.com", "quickbooks.com", "xero.com",
            "freshbooks.com",
        ),
        patterns=_patterns(
            r"bank", r"finance", r"money", r"invest", r"crypto", r"trading", r"credit", r"loan",
        ),
    ),
    CategoryRule(
        name="Health & Fitness",
        icon="🏥",
        color="#16A34A",
        keywords=(
            "webmd.com", "mayoclinic.org", "healthline.com", "medicalnewstoday.com",
            "nih.gov", "cdc.gov", "who.int", "myfitnesspal.com", "fitbit.com", "strava.com",
            "nike.com/run-club", "headspace.com", "calm.com", "meditation.com",
            "betterhelp.com", "talkspace.com", "psychology.com", "teladoc.com", "amwell.com",
            "mdlive.com",
        ),
        patterns=_patterns(
            r"health", r"medical", r"fitness", r"wellness", r"doctor", r"hospital",
        ),
    ),
    CategoryRule(
        name="Travel & Maps",
        icon="✈️",
        color="#0EA5E9",
        keywords=(
            "maps.google.com", "waze.com", "mapquest.com", "bing.com/maps", "expedia.com",
            "booking.com", "hotels.com", "airbnb.com", "kayak.com", "priceline.com",
            "tripadvisor.com", "vrbo.com", "delta.com", "american.com", "united.com",
            "southwest.com", "jetblue.com", "alaska.com", "tripit.com", "lonely.planet",
            "fodors.com", "frommers.com",
        ),
        patterns=_patterns(r"travel", r"trip", r"hotel", r"flight", r"map", r"navigation"),
    ),
    CategoryRule(
        name="Gaming",
        icon="🎮",
        color="#8B5CF6",
        keywords=(
            "steam.com", "steamcommunity.com", "epicgames.com", "gog.com", "battle.net",
            "ubisoft.com", "ea.com", "origin.com", "xbox.com", "playstation.com",
            "nintendo.com", "stadia.google.com", "geforce.nvidia.com", "xbox.com/play",
            "amazon.com/luna", "reddit.com/r/gaming", "gamefaqs.com", "ign.com",
            "gamespot.com", "polygon.com", "kotaku.com", "pcgamer.com",
            "rockpapershotgun.com", "twitch.tv", "youtube.com/gaming", "mixer.com",
            "unity.com", "unrealengine.com", "godotengine.org", "itch.io", "steamdb.info",
            "protondb.com", "nexusmods.com",
        ),
        patterns=_patterns(
            r"gaming", r"game", r"steam", r"twitch", r"esports", r"minecraft", r"fortnite",
        ),
    ),
    CategoryRule(
        name="Design & Creative",
        icon="🎨",
        color="#EC4899",
        keywords=(
            "figma.com", "sketch.com", "adobe.com", "canva.com", "invision.com", "framer.com",
            "principle.design", "zeplin.io", "marvel.app", "behance.net", "dribbble.com",
            "deviantart.com", "artstation.com", "creativemarket.com", "shutterstock.com",
            "unsplash.com", "pexels.com", "blender.org", "autodesk.com", "cinema4d.com",
            "sketchfab.com", "coolors.co", "color.adobe.com", "fonts.google.com",
            "typeface.com", "fontawesome.com", "awwwards.com", "siteinspire.com",
            "ui-patterns.com", "mobbin.design",
        ),
        patterns=_patterns(
            r"design", r"creative", r"graphics", r"illustration", r"typography", r"branding",
            r"ui.ux",
        ),
    ),
    CategoryRule(
        name="Productivity & Tools",
        icon="⚡",
        color="#059669",
        keywords=(
            "notion.so", "obsidian.md", "roamresearch.com", "logseq.com", "bear.app",
            "typora.io", "todoist.com", "any.do", "asana.com", "monday.com", "clickup.com",
            "basecamp.com", "linear.app", "toggl.com", "harvest.com", "clockify.com",
            "rescuetime.com", "dropbox.com", "onedrive.com", "box.com", "wetransfer.com",
            "loom.com", "calendly.com", "doodle.com", "when2meet.com", "zapier.com",
            "ifttt.com", "integromat.com", "1password.com", "lastpass.com", "bitwarden.com",
            "dashlane.com",
        ),
        patterns=_patterns(
            r"productivity", r"workflow", r"organize", r"manage", r"calendar", r"schedule",
            r"todo",
        ),
    ),
    CategoryRule(
        name="Food & Cooking",
        icon="🍳",
        color="#F97316",
        keywords=(
            "allrecipes.com", "foodnetwork.com", "epicurious.com", "food.com", "tasty.co",
            "buzzfeed.com/tasty", "seriouseats.com", "bonappetit.com", "doordash.com",
            "ubereats.com", "grubhub.com", "postmates.com", "seamless.com", "menulog.com",
            "justeat.com", "mealime.com", "plantoeat.com", "emeals.com", "yummly.com",
            "instacart.com", "shipt.com", "fresh.amazon.com", "peapod.com", "yelp.com",
            "zomato.com", "opentable.com", "resy.com", "youtube.com/c/bingingwithbabish",
            "youtube.com/c/joshuaweissman",
        ),
        patterns=_patterns(
            r"food", r"cooking", r"recipe", r"restaurant", r"delivery", r"kitchen", r"chef",
        ),
    ),
)


def find_rule(name: str, rules: tuple[CategoryRule, ...]) -> CategoryRule | None:
    """Return the rule with the given name, or None."""
    for rule in rules:
        if rule.name == name:
            return rule
    return None


def category_icon(name: str, rules: tuple[CategoryRule, ...] = DEFAULT_RULES) -> str:
    """Icon for a category, DEFAULT_ICON for unknown names (incl. Uncategorized)."""
    rule = find_rule(name, rules)
    return rule.icon if rule and rule.icon else DEFAULT_ICON


def category_color(name: str, rules: tuple[CategoryRule, ...] = DEFAULT_RULES) -> str:
    """Color for a category, DEFAULT_COLOR for unknown names."""
    rule = find_rule(name, rules)
    return rule.color if rule and rule.color else DEFAULT_COLOR


def build_rule(data: dict) -> CategoryRule:
    """Build a CategoryRule from a config table.

    Raises:
        ValueError: If the name is missing or a pattern is not a valid regex.
    """
    name = data.get("name")
    if not name:
        raise ValueError("Category rule needs a non-empty 'name'")
    sources = [str(p) for p in data.get("patterns", [])]
    try:
        patterns = _patterns(*sources)
    except re.error as e:
        raise ValueError(f"Invalid pattern in category {name!r}: {e}") from e
    return CategoryRule(
        name=str(name),
        icon=str(data.get("icon", DEFAULT_ICON)),
        color=str(data.get("color", DEFAULT_COLOR)),
        keywords=tuple(str(k) for k in data.get("keywords", [])),
        patterns=patterns,
    )


def rule_to_table(rule: CategoryRule) -> dict:
    """Inverse of build_rule: patterns are written back as their source strings."""
    return {
        "name": rule.name,
        "icon": rule.icon,
        "color": rule.color,
        "keywords": list(rule.keywords),
        "patterns": [p.pattern for p in rule.patterns],
    }
