"""Integration tests for the source extractors with recorded listing pages."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from buidltown_scraper.config.loader import SourceSettings
from buidltown_scraper.core.models import HackathonFormat, HackathonStatus, PrizePool, Source
from buidltown_scraper.errors import ExtractorFetchError
from buidltown_scraper.extractors import (
    AkindoExtractor,
    DevfolioExtractor,
    DevpostExtractor,
    DoraHacksExtractor,
    EthGlobalExtractor,
    HackQuestExtractor,
    TaikaiExtractor,
)
from buidltown_scraper.extractors.devfolio import theme_names
from buidltown_scraper.extractors.ethglobal import clean_event_name, slug_from_href
from buidltown_scraper.extractors.hackquest import strip_language_prefix
from buidltown_scraper.extractors.taikai import challenges_from_next_data


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def by_id(records) -> dict:
    return {r.source_id: r for r in records}


async def map_all(extractor) -> dict:
    """Run fetch, dedupe, enrich and map without a store."""
    candidates = extractor.dedupe(await extractor.fetch_candidates())
    candidates = await extractor.enrich(candidates)
    records = []
    for candidate in candidates:
        try:
            records.append(extractor.map_candidate(candidate))
        except ValueError:
            continue
    return by_id(records)


class TestEthGlobalExtractor:
    """Tests for the ETHGlobal extractor."""

    LISTING = """
    <html><body>
      <a href="/events">View all events</a>
      <article>
        <a href="/events/bangkok">
          <h3>ETHGlobal Bangkok</h3>
          <span>Nov 15th, 2024</span><span>Nov 17th, 2024</span><span>Hackathon</span>
        </a>
        <p>Bangkok, Thailand</p>
      </article>
      <article>
        <a href="/events/bangkok/prizes">ETHGlobal Bangkok prizes</a>
      </article>
      <article>
        <a href="/events/agents">
          <h3>Agentic Ethereum</h3>
          <span>Jun 5th, 2026</span><span>Jun 26th, 2026</span><span>Virtual</span>
        </a>
        <a href="/events/agents/apply">Apply now</a>
      </article>
      <article>
        <a href="/events/mystery"><h3>Mystery Event</h3></a>
      </article>
    </body></html>
    """

    DETAIL = """
    <html><head>
      <meta property="og:image" content="https://ethglobal.b-cdn.net/bangkok.png">
      <meta name="description" content="ETHGlobal Bangkok is the biggest Ethereum hackathon in Asia.">
    </head><body><h1>ETHGlobal Bangkok</h1></body></html>
    """

    @pytest.fixture
    def routes(self):
        return {
            "https://ethglobal.com/events": self.LISTING,
            "https://ethglobal.com/events/bangkok": self.DETAIL,
            "https://ethglobal.com/events/agents": "<html><body><h1>Agentic Ethereum</h1></body></html>",
            "https://ethglobal.com/events/mystery": "<html><body><h1>Mystery Event</h1><p>Details soon</p></body></html>",
        }

    def test_slug_from_href(self):
        """Test slug extraction from event links."""
        assert slug_from_href("/events/bangkok/prizes?x=1") == "bangkok"
        assert slug_from_href("/events") is None

    def test_clean_event_name(self):
        """Test that dates and type words are stripped from card text."""
        text = "ETHGlobal Bangkok Nov 15th, 2024 Nov 17th, 2024 Hackathon"
        assert clean_event_name(text, "bangkok") == "ETHGlobal Bangkok"
        assert clean_event_name("Nov 15th, 2024", "new-york") == "New York"

    @pytest.mark.asyncio
    async def test_listing(self, reconciler, mock_http, routes, fixed_now):
        """Test parsing, enrichment and mapping of the events page."""
        async with mock_http(routes) as client:
            records = await map_all(EthGlobalExtractor(reconciler, http_client=client, now=fixed_now))

        assert set(records) == {"bangkok", "agents", "mystery"}

        bangkok = records["bangkok"]
        assert bangkok.name == "ETHGlobal Bangkok"
        assert bangkok.start_date == utc(2024, 11, 15)
        assert bangkok.end_date == utc(2024, 11, 17)
        assert bangkok.status == HackathonStatus.COMPLETED
        assert bangkok.format == HackathonFormat.IN_PERSON
        assert bangkok.location == "Bangkok"
        assert bangkok.chains == ["Ethereum"]
        assert bangkok.chain_ids == [1]
        assert bangkok.is_official is True
        assert bangkok.registration_url == "https://ethglobal.com/events/bangkok"
        assert bangkok.banner_url == "https://ethglobal.b-cdn.net/bangkok.png"
        assert "biggest Ethereum hackathon" in bangkok.description
        assert bangkok.slug == "ethglobal-bangkok-ethglobal-bangkok"

        agents = records["agents"]
        assert agents.name == "Agentic Ethereum"
        assert agents.format == HackathonFormat.ONLINE
        assert agents.location == "Online"
        assert agents.status == HackathonStatus.UPCOMING

    @pytest.mark.asyncio
    async def test_run_keeps_event_without_dates(self, reconciler, store, mock_http, routes, fixed_now):
        """Test that an event without any dates is stored with unknown dates."""
        async with mock_http(routes) as client:
            counts = await EthGlobalExtractor(reconciler, http_client=client, now=fixed_now).run()

        assert counts.found == 3
        assert counts.created == 3
        mystery = store.get("hackathons", "ethglobal", "mystery")
        assert mystery["name"] == "Mystery Event"
        assert mystery["start_date"] is None
        assert mystery["end_date"] is None
        assert mystery["status"] == HackathonStatus.UPCOMING.value

    @pytest.mark.asyncio
    async def test_failed_detail_page_keeps_stored_row(self, reconciler, store, mock_http, routes, fixed_now):
        """Test that a detail page failing on a rerun leaves the stored event alone."""
        async with mock_http(routes) as client:
            await EthGlobalExtractor(reconciler, http_client=client, now=fixed_now).run()
        before = store.get("hackathons", "ethglobal", "bangkok")

        routes["https://ethglobal.com/events/bangkok"] = lambda request: httpx.Response(503)
        async with mock_http(routes) as client:
            counts = await EthGlobalExtractor(reconciler, http_client=client, now=fixed_now).run()

        assert counts.failed == 1
        assert counts.found == 2
        assert counts.unchanged == 2
        assert counts.updated == 0
        assert store.get("hackathons", "ethglobal", "bangkok") == before

    @pytest.mark.asyncio
    async def test_listing_unreachable(self, reconciler, mock_http, fixed_now):
        """Test that an unreachable listing fails the run."""
        async with mock_http({}) as client:
            with pytest.raises(ExtractorFetchError):
                await EthGlobalExtractor(reconciler, http_client=client, now=fixed_now).run()


class TestDevfolioExtractor:
    """Tests for the Devfolio extractor."""

    ETHINDIA = {
        "slug": "ethindia-2026",
        "name": "ETHIndia 2026",
        "tagline": "Asia's biggest Ethereum hackathon",
        "desc": "Build on Ethereum and Polygon with 2,000 hackers.",
        "starts_at": "2026-12-04T03:30:00Z",
        "ends_at": "2026-12-06T12:30:00Z",
        "is_online": False,
        "location": "Bengaluru, India",
        "themes": [{"theme": {"name": "DeFi"}}, "AI"],
        "hackathon_setting": {
            "site": "https://ethindia.co",
            "discord": "https://discord.gg/ethindia",
            "twitter": "https://twitter.com/ethindiaco",
            "logo": "https://assets.devfolio.co/ethindia.png",
        },
        "cover_img": "https://assets.devfolio.co/ethindia-cover.png",
        "participants_count": 2000,
    }

    OLD = {
        "uuid": "5f1c9a2e-old",
        "name": "Old Hack",
        "starts_at": "2025-01-10T00:00:00Z",
        "ends_at": "2025-01-12T00:00:00Z",
        "is_online": True,
        "themes": ["Gaming"],
    }

    @classmethod
    def handler(cls, failing=()):
        pages = {
            "application_open": [cls.ETHINDIA],
            "past": [cls.OLD, {**cls.ETHINDIA, "name": "Duplicate"}],
        }

        def respond(request):
            listing_filter = request.url.params["filter"]
            if listing_filter in failing:
                return httpx.Response(500)
            page = int(request.url.params["page"])
            items = pages.get(listing_filter, []) if page == 1 else []
            return httpx.Response(200, json={"result": items})

        return respond

    def test_theme_names(self):
        """Test flattening of theme objects."""
        assert theme_names([{"theme": {"name": "DeFi"}}, {"name": "AI"}, "NFT", {"x": 1}]) == ["DeFi", "AI", "NFT"]

    @pytest.mark.asyncio
    async def test_listing(self, reconciler, mock_http, fixed_now):
        """Test mapping across filters with a failing later filter."""
        routes = {"https://api.devfolio.co/api/hackathons": self.handler(failing=("upcoming",))}
        async with mock_http(routes) as client:
            records = await map_all(DevfolioExtractor(reconciler, http_client=client, now=fixed_now))

        assert set(records) == {"ethindia-2026", "5f1c9a2e-old"}

        ethindia = records["ethindia-2026"]
        assert ethindia.name == "ETHIndia 2026"
        assert ethindia.status == HackathonStatus.REGISTRATION_OPEN
        assert ethindia.format == HackathonFormat.IN_PERSON
        assert ethindia.location == "Bengaluru, India"
        assert ethindia.start_date == utc(2026, 12, 4, 3, 30)
        assert ethindia.registration_url == "https://ethindia-2026.devfolio.co/"
        assert ethindia.website_url == "https://ethindia.co"
        assert ethindia.discord_url == "https://discord.gg/ethindia"
        assert ethindia.logo_url == "https://assets.devfolio.co/ethindia.png"
        assert ethindia.banner_url == "https://assets.devfolio.co/ethindia-cover.png"
        assert ethindia.themes == ["DeFi", "AI"]
        assert {"defi", "ai"} <= set(ethindia.categories)
        assert ethindia.chains == ["Ethereum", "Polygon"]
        assert ethindia.chain_ids == [1, 137]
        assert ethindia.participant_count == 2000
        assert ethindia.short_description == "Asia's biggest Ethereum hackathon"

        old = records["5f1c9a2e-old"]
        assert old.status == HackathonStatus.COMPLETED
        assert old.format == HackathonFormat.ONLINE
        assert old.location == "Online"
        assert old.categories == ["gaming"]

    @pytest.mark.asyncio
    async def test_first_filter_fatal(self, reconciler, mock_http, fixed_now):
        """Test that a failing first filter fails the run."""
        routes = {"https://api.devfolio.co/api/hackathons": self.handler(failing=("application_open",))}
        async with mock_http(routes) as client:
            with pytest.raises(ExtractorFetchError):
                await DevfolioExtractor(reconciler, http_client=client, now=fixed_now).run()

    @pytest.mark.asyncio
    async def test_configured_filters(self, reconciler, mock_http, fixed_now):
        """Test that filters come from the source metadata."""
        settings = SourceSettings(
            source=Source.DEVFOLIO,
            listing_url="https://api.devfolio.co/api/hackathons",
            metadata={"filters": ["past"]},
        )
        routes = {"https://api.devfolio.co/api/hackathons": self.handler()}
        async with mock_http(routes) as client:
            extractor = DevfolioExtractor(reconciler, http_client=client, settings=settings, now=fixed_now)
            records = await map_all(extractor)

        assert extractor.filters == ["past"]
        # Found under "past" only, so no explicit registration status
        assert records["ethindia-2026"].name == "Duplicate"
        assert records["ethindia-2026"].status == HackathonStatus.UPCOMING


class TestDoraHacksExtractor:
    """Tests for the DoraHacks extractor."""

    LISTING = """
    <html><body>
      <a href="/hackathon/solana-summer/detail">
        <img src="/img/solana.png">
        <span>Solana Foundation</span>
        <h3>Solana Summer Hackathon</h3>
        <span>Ongoing</span><span>Virtual</span>
        <span>$250,000</span><span>1,234 BUIDLers</span>
      </a>
      <a href="https://dorahacks.io/hackathon/eth-denver">
        <div>ETHDenver BUIDLathon 2026</div>
        <div>Upcoming</div>
        <div>Denver, USA</div>
        <div>🏆 50,000 USDC</div>
      </a>
      <a href="/hackathon/solana-summer/buidl">Submitted BUIDLs</a>
      <a href="/buidl/123">Not a hackathon</a>
    </body></html>
    """

    DETAIL = """
    <html><head>
      <meta property="og:image" content="https://cdn.dorahacks.io/solana-banner.png">
    </head><body>
      <nav>Jan 1 - 2, 2020</nav>
      <main>
        <p>Hackathon period: Jan 15 - Feb 15, 2026</p>
        <div class="description">The Solana Summer Hackathon invites builders to ship consumer apps, payments and DePIN projects on Solana.</div>
        <p>2,345 participants</p>
        <a href="https://discord.gg/solana">Discord</a>
        <a href="https://twitter.com/solana">Twitter</a>
      </main>
    </body></html>
    """

    DENVER_DETAIL = "<html><body><main>Schedule to be announced</main></body></html>"

    @pytest.fixture
    def routes(self):
        return {
            "https://dorahacks.io/hackathon": self.LISTING,
            "https://dorahacks.io/hackathon/solana-summer": self.DETAIL,
            "https://dorahacks.io/hackathon/eth-denver": self.DENVER_DETAIL,
        }

    @pytest.mark.asyncio
    async def test_listing(self, reconciler, mock_http, routes, fixed_now):
        """Test card parsing and detail enrichment."""
        async with mock_http(routes) as client:
            records = await map_all(DoraHacksExtractor(reconciler, http_client=client, now=fixed_now))

        assert set(records) == {"solana-summer", "eth-denver"}

        solana = records["solana-summer"]
        assert solana.name == "Solana Summer Hackathon"
        assert solana.status == HackathonStatus.ONGOING
        assert solana.format == HackathonFormat.ONLINE
        assert solana.location == "Virtual"
        assert solana.prize_pool == PrizePool(amount=250000.0, currency="USD")
        assert solana.start_date == utc(2026, 1, 15)
        assert solana.end_date == utc(2026, 2, 15)
        assert solana.participant_count == 2345
        assert solana.discord_url == "https://discord.gg/solana"
        assert solana.twitter_url == "https://twitter.com/solana"
        assert solana.banner_url == "https://cdn.dorahacks.io/solana-banner.png"
        assert solana.logo_url == "https://dorahacks.io/img/solana.png"
        assert solana.description.startswith("The Solana Summer Hackathon")
        assert solana.chains == ["Solana"]
        assert solana.chain_ids == [900]
        assert solana.registration_url == "https://dorahacks.io/hackathon/solana-summer"

        denver = records["eth-denver"]
        assert denver.name == "ETHDenver BUIDLathon 2026"
        assert denver.status == HackathonStatus.UPCOMING
        assert denver.format == HackathonFormat.IN_PERSON
        assert denver.location == "Denver, USA"
        assert denver.prize_pool == PrizePool(amount=50000.0, currency="USDC")
        assert denver.start_date is None

    @pytest.mark.asyncio
    async def test_json_ld_dates_fallback(self, reconciler, mock_http, routes, fixed_now):
        """Test that JSON-LD dates are used when the page text has none."""
        routes["https://dorahacks.io/hackathon/solana-summer"] = """
        <html><head>
          <script type="application/ld+json">
            {"@type": "Event", "startDate": "2026-03-01T00:00:00Z", "endDate": "2026-03-31T00:00:00Z"}
          </script>
        </head><body><main>No dates here</main></body></html>
        """
        async with mock_http(routes) as client:
            records = await map_all(DoraHacksExtractor(reconciler, http_client=client, now=fixed_now))

        assert records["solana-summer"].start_date == utc(2026, 3, 1)
        assert records["solana-summer"].end_date == utc(2026, 3, 31)

    @pytest.mark.asyncio
    async def test_json_ld_dates_beat_page_text(self, reconciler, mock_http, routes, fixed_now):
        """Test that JSON-LD dates win over date text elsewhere on the page."""
        routes["https://dorahacks.io/hackathon/solana-summer"] = """
        <html><head>
          <script type="application/ld+json">
            {"@type": "Event", "startDate": "2026-03-01T00:00:00Z", "endDate": "2026-03-31T00:00:00Z"}
          </script>
        </head><body><main>
          <p>Previous edition: Jan 15 - Feb 15, 2025</p>
        </main></body></html>
        """
        async with mock_http(routes) as client:
            records = await map_all(DoraHacksExtractor(reconciler, http_client=client, now=fixed_now))

        assert records["solana-summer"].start_date == utc(2026, 3, 1)
        assert records["solana-summer"].end_date == utc(2026, 3, 31)

    @pytest.mark.asyncio
    async def test_failed_detail_page_keeps_stored_row(self, reconciler, store, mock_http, routes, fixed_now):
        """Test that a detail page failing on a rerun does not wipe stored dates or text."""
        async with mock_http(routes) as client:
            first = await DoraHacksExtractor(reconciler, http_client=client, now=fixed_now).run()
        before = store.get("hackathons", "dorahacks", "solana-summer")

        routes["https://dorahacks.io/hackathon/solana-summer"] = lambda request: httpx.Response(503)
        async with mock_http(routes) as client:
            second = await DoraHacksExtractor(reconciler, http_client=client, now=fixed_now).run()

        assert first.created == 2
        assert second.failed == 1
        assert second.found == 1
        assert second.unchanged == 1
        assert second.updated == 0

        after = store.get("hackathons", "dorahacks", "solana-summer")
        assert after == before
        assert after["start_date"] == "2026-01-15T00:00:00+00:00"
        assert after["description"].startswith("The Solana Summer Hackathon")


class TestAkindoExtractor:
    """Tests for the Akindo extractor."""

    HACKATHONS = """
    <html><body>
      <a href="/hackathons/abc123">
        <img src="/img/astar.png">
        <h3>Akindo x Astar Hackathon</h3>
        <p>Build dApps on Astar</p>
        <span>#DeFi</span><span>#Gaming</span>
        <span>10,000 USDC</span><span>Open</span>
      </a>
    </body></html>
    """

    WAVE_HACKS = """
    <html><body>
      <a href="/wave-hacks/abc123">
        <h3>Wave Hack Season 1</h3>
        <span>5,000 USDC</span><span>Building</span><span>120 participants</span>
      </a>
    </body></html>
    """

    @pytest.fixture
    def settings(self):
        return SourceSettings(
            source=Source.AKINDO,
            listing_url="https://app.akindo.io/hackathons",
            metadata={
                "extra_listings": [
                    "https://app.akindo.io/wave-hacks",
                    "https://app.akindo.io/missing",
                ],
            },
        )

    @pytest.mark.asyncio
    async def test_listings(self, reconciler, mock_http, settings, fixed_now):
        """Test hackathon and wave hack cards with estimated dates."""
        routes = {
            "https://app.akindo.io/hackathons": self.HACKATHONS,
            "https://app.akindo.io/wave-hacks": self.WAVE_HACKS,
        }
        async with mock_http(routes) as client:
            extractor = AkindoExtractor(reconciler, http_client=client, settings=settings, now=fixed_now)
            records = await map_all(extractor)

        assert set(records) == {"hackathon-abc123", "buildathon-abc123"}

        hackathon = records["hackathon-abc123"]
        assert hackathon.name == "Akindo x Astar Hackathon"
        assert hackathon.description == "Build dApps on Astar"
        assert hackathon.status == HackathonStatus.REGISTRATION_OPEN
        assert hackathon.prize_pool == PrizePool(amount=10000.0, currency="USDC")
        assert hackathon.themes == ["DeFi", "Gaming"]
        assert hackathon.categories[:2] == ["defi", "gaming"]
        assert hackathon.start_date == utc(2026, 5, 1)
        assert hackathon.end_date == utc(2026, 5, 31)
        assert hackathon.location == "Online"
        assert hackathon.is_official is True
        assert hackathon.logo_url == "https://app.akindo.io/img/astar.png"

        wave = records["buildathon-abc123"]
        assert wave.short_description == "Akindo Buildathon"
        assert wave.status == HackathonStatus.ONGOING
        assert wave.start_date == utc(2026, 4, 24)
        assert wave.end_date == utc(2026, 5, 8)
        assert wave.participant_count == 120
        assert wave.registration_url == "https://app.akindo.io/wave-hacks/abc123"

    @pytest.mark.asyncio
    async def test_estimated_dates_stable_within_day(self, reconciler, store, mock_http, settings):
        """Test that reruns on the same day leave rows unchanged."""
        routes = {
            "https://app.akindo.io/hackathons": self.HACKATHONS,
            "https://app.akindo.io/wave-hacks": self.WAVE_HACKS,
        }
        morning = lambda: utc(2026, 5, 1, 8)  # noqa: E731
        evening = lambda: utc(2026, 5, 1, 20)  # noqa: E731

        async with mock_http(routes) as client:
            await AkindoExtractor(reconciler, http_client=client, settings=settings, now=morning).run()
            counts = await AkindoExtractor(reconciler, http_client=client, settings=settings, now=evening).run()

        assert counts.unchanged == 2
        assert counts.updated == 0


class TestDevpostExtractor:
    """Tests for the Devpost extractor."""

    WEB3 = {
        "id": 21000,
        "title": "Chainlink Block Magic",
        "organization_name": "Chainlink Labs",
        "url": "https://block-magic.devpost.com/",
        "thumbnail_url": "//d112y698adiu2z.cloudfront.net/block-magic.png",
        "displayed_location": {"icon": "globe", "location": "Online"},
        "open_state": "open",
        "submission_period_dates": "Apr 10 - May 20, 2026",
        "prize_amount": "$<span data-currency-value>350,000</span>",
        "registrations_count": 5000,
        "themes": [{"id": 1, "name": "Blockchain"}, {"id": 2, "name": "DeFi"}],
    }

    OTHER = {
        "id": 21001,
        "title": "Healthcare Hack",
        "organization_name": "City Hospital",
        "url": "https://health.devpost.com/",
        "displayed_location": {"location": "Boston, MA"},
        "open_state": "upcoming",
        "submission_period_dates": "Jun 01 - 03, 2026",
        "themes": [{"id": 9, "name": "Health"}],
    }

    @classmethod
    def handler(cls, request):
        page = int(request.url.params["page"])
        items = [cls.WEB3, cls.OTHER] if page == 1 else []
        return httpx.Response(200, json={"hackathons": items, "meta": {"total_count": 2}})

    @pytest.mark.asyncio
    async def test_web3_filter(self, reconciler, mock_http, fixed_now):
        """Test that only web3 hackathons are kept and mapped."""
        routes = {"https://devpost.com/api/hackathons": self.handler}
        async with mock_http(routes) as client:
            records = await map_all(DevpostExtractor(reconciler, http_client=client, now=fixed_now))

        assert set(records) == {"21000"}

        record = records["21000"]
        assert record.name == "Chainlink Block Magic"
        assert record.status == HackathonStatus.ONGOING
        assert record.start_date == utc(2026, 4, 10)
        assert record.end_date == utc(2026, 5, 20)
        assert record.prize_pool == PrizePool(amount=350000.0, currency="USD")
        assert record.logo_url == "https://d112y698adiu2z.cloudfront.net/block-magic.png"
        assert record.short_description == "Hosted by Chainlink Labs"
        assert record.participant_count == 5000
        assert record.location == "Online"
        assert record.themes == ["Blockchain", "DeFi"]

    @pytest.mark.asyncio
    async def test_filter_disabled(self, reconciler, mock_http, fixed_now):
        """Test that every hackathon is kept when the filter is off."""
        settings = SourceSettings(
            source=Source.DEVPOST,
            listing_url="https://devpost.com/api/hackathons",
            metadata={"web3_only": False},
        )
        routes = {"https://devpost.com/api/hackathons": self.handler}
        async with mock_http(routes) as client:
            extractor = DevpostExtractor(reconciler, http_client=client, settings=settings, now=fixed_now)
            records = await map_all(extractor)

        other = records["21001"]
        assert other.format == HackathonFormat.IN_PERSON
        assert other.location == "Boston, MA"
        assert other.status == HackathonStatus.UPCOMING
        assert other.prize_pool is None
        assert other.categories == ["web3"]


class TestHackQuestExtractor:
    """Tests for the HackQuest extractor."""

    LISTING = """
    <html><body>
      <a href="/ko/hackathons/mantle-global">
        <img src="/img/mantle.png">
        <h2>Mantle Global Hackathon</h2>
        <p>Build on Mantle Network</p>
        <span>실시간</span><span>ONLINE</span><span>$120,000</span>
      </a>
      <a href="/en/hackathons/sui-overflow">
        <h2>Sui Overflow</h2>
        <span>Ended</span><span>IN-PERSON</span><span>300 participants</span>
      </a>
      <a href="/hackathons/ab"><h2>Too short</h2></a>
    </body></html>
    """

    def test_strip_language_prefix(self):
        """Test that the locale prefix is dropped once."""
        assert strip_language_prefix("https://www.hackquest.io/ko/hackathons/x") == (
            "https://www.hackquest.io/hackathons/x"
        )
        assert strip_language_prefix("https://www.hackquest.io/hackathons/x") == (
            "https://www.hackquest.io/hackathons/x"
        )

    @pytest.mark.asyncio
    async def test_listing(self, reconciler, mock_http, fixed_now):
        """Test Korean and English cards."""
        routes = {"https://www.hackquest.io/hackathons": self.LISTING}
        async with mock_http(routes) as client:
            records = await map_all(HackQuestExtractor(reconciler, http_client=client, now=fixed_now))

        assert set(records) == {"mantle-global", "sui-overflow"}

        mantle = records["mantle-global"]
        assert mantle.status == HackathonStatus.ONGOING
        assert mantle.format == HackathonFormat.ONLINE
        assert mantle.location == "Online"
        assert mantle.prize_pool == PrizePool(amount=120000.0, currency="USD")
        assert mantle.registration_url == "https://www.hackquest.io/hackathons/mantle-global"
        assert mantle.chains == ["Mantle"]
        assert mantle.chain_ids == [5000]
        assert mantle.start_date == utc(2026, 4, 24)

        sui = records["sui-overflow"]
        assert sui.status == HackathonStatus.COMPLETED
        assert sui.format == HackathonFormat.IN_PERSON
        assert sui.location is None
        assert sui.participant_count == 300
        assert sui.start_date == utc(2026, 3, 2)
        assert sui.end_date == utc(2026, 4, 1)


class TestTaikaiExtractor:
    """Tests for the TAIKAI extractor."""

    CHALLENGE = {
        "id": "c1",
        "slug": "bright-hack",
        "name": "Bright Hack",
        "organization": {"slug": "bright"},
        "shortDescription": "Build on Polygon",
        "description": {"json": "rich text"},
        "startDate": "2026-06-01T09:00:00Z",
        "endDate": "2026-06-30T18:00:00Z",
        "prizePool": 25000,
        "currency": "EUR",
        "tags": ["DeFi", 7],
        "logo": {"url": "https://taikai.azureedge.net/logo.png"},
        "cover": "https://taikai.azureedge.net/cover.png",
        "participantsCount": 88,
        "format": "Hybrid",
    }

    @classmethod
    def page(cls, payload: dict) -> str:
        return (
            "<html><body><div id='__next'></div>"
            f"<script id='__NEXT_DATA__' type='application/json'>{json.dumps(payload)}</script>"
            "</body></html>"
        )

    def test_challenge_locations(self):
        """Test every known payload layout."""
        challenge = {"slug": "a", "name": "A"}
        layouts = [
            {"props": {"pageProps": {"challenges": [challenge]}}},
            {"props": {"pageProps": {"initialState": {"challenges": {"list": [challenge]}}}}},
            {"props": {"pageProps": {"dehydratedState": {"queries": [{"state": {"data": {"items": [challenge]}}}]}}}},
            {"props": {"pageProps": {"apolloState": {"Challenge:1": challenge, "User:2": {"name": "x"}}}}},
        ]
        for layout in layouts:
            assert challenges_from_next_data(layout) == [challenge]

    @pytest.mark.asyncio
    async def test_next_data(self, reconciler, mock_http, fixed_now):
        """Test challenges from the Next.js payload."""
        page = self.page({"props": {"pageProps": {"challenges": [self.CHALLENGE]}}})
        async with mock_http({"https://taikai.network/hackathons": page}) as client:
            records = await map_all(TaikaiExtractor(reconciler, http_client=client, now=fixed_now))

        record = records["bright-hack"]
        assert record.registration_url == "https://taikai.network/bright/hackathons/bright-hack"
        assert record.description == "Build on Polygon"
        assert record.prize_pool == PrizePool(amount=25000.0, currency="EUR")
        assert record.format == HackathonFormat.HYBRID
        assert record.status == HackathonStatus.UPCOMING
        assert record.start_date == utc(2026, 6, 1, 9)
        assert record.participant_count == 88
        assert record.logo_url == "https://taikai.azureedge.net/logo.png"
        assert record.banner_url == "https://taikai.azureedge.net/cover.png"
        assert record.themes == ["DeFi"]
        assert record.chains == ["Polygon"]
        assert record.is_official is True

    @pytest.mark.asyncio
    async def test_card_fallback(self, reconciler, mock_http, fixed_now):
        """Test anchor cards when the page has no payload."""
        page = """
        <html><body>
          <a href="/hackathons/dao-jam"><h3>DAO Jam</h3><span>Jun 10 - 12, 2026</span><span>$5,000</span></a>
        </body></html>
        """
        async with mock_http({"https://taikai.network/hackathons": page}) as client:
            records = await map_all(TaikaiExtractor(reconciler, http_client=client, now=fixed_now))

        record = records["dao-jam"]
        assert record.name == "DAO Jam"
        assert record.start_date == utc(2026, 6, 10)
        assert record.end_date == utc(2026, 6, 12)
        assert record.prize_pool == PrizePool(amount=5000.0, currency="USD")
        assert record.registration_url == "https://taikai.network/hackathons/dao-jam"
        assert "dao" in record.categories
