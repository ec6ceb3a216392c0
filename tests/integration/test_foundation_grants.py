"""End-to-end tests for the curated foundation grants."""

import copy

import pytest

from buidltown_scraper.config.loader import ConfigLoader
from buidltown_scraper.core.models import GrantStatus
from buidltown_scraper.errors import ExtractorFetchError
from buidltown_scraper.extractors import FoundationGrantsExtractor


@pytest.fixture
def programs():
    return ConfigLoader().load_foundation_grants()


class TestFoundationGrantsExtractor:
    """Tests for FoundationGrantsExtractor against the in-memory store."""

    @pytest.mark.asyncio
    async def test_first_run_creates_all(self, reconciler, store, fixed_now):
        """Test that every curated program is created."""
        counts = await FoundationGrantsExtractor(reconciler, now=fixed_now).run()

        assert counts.found == 43
        assert counts.created == 43
        assert counts.failed == 0
        assert store.count("grants") == 43

    @pytest.mark.asyncio
    async def test_rerun_unchanged(self, reconciler, store, fixed_now):
        """Test that a second run makes no writes."""
        await FoundationGrantsExtractor(reconciler, now=fixed_now).run()
        counts = await FoundationGrantsExtractor(reconciler, now=fixed_now).run()

        assert counts.created == 0
        assert counts.updated == 0
        assert counts.unchanged == 43
        assert store.writes == 43

    @pytest.mark.asyncio
    async def test_changed_funding_updates_one(self, reconciler, store, programs, fixed_now):
        """Test that a funding change updates exactly that program."""
        await FoundationGrantsExtractor(reconciler, programs=programs, now=fixed_now).run()

        changed = copy.deepcopy(programs)
        target = next(p for p in changed if p["slug"] == "ef-grants")
        target["funding"]["max_amount"] = 750000
        counts = await FoundationGrantsExtractor(reconciler, programs=changed, now=fixed_now).run()

        assert counts.updated == 1
        assert counts.unchanged == 42
        row = store.get("grants", "foundation_grants", "ef-grants")
        assert row["funding"]["max_amount"] == 750000

    @pytest.mark.asyncio
    async def test_ethereum_foundation_row(self, reconciler, store, fixed_now):
        """Test the stored shape of one program."""
        await FoundationGrantsExtractor(reconciler, now=fixed_now).run()
        row = store.get("grants", "foundation_grants", "ef-grants")

        assert row["name"] == "Ethereum Foundation Grants"
        assert row["foundation"]["name"] == "Ethereum Foundation"
        assert row["chains"] == ["Ethereum"]
        assert row["chain_ids"] == [1]
        assert row["status"] == GrantStatus.ACTIVE.value
        assert row["is_rolling"] is True
        assert row["funding"]["currency"] == "USD"
        assert row["funding"]["format"] == "range"
        assert {"infrastructure", "research", "public-goods"} <= set(row["categories"])
        assert row["application_url"] == "https://esp.ethereum.foundation/"
        assert row["slug"] == "ethereum-foundation-grants-foundation_grants-ef-grant"

    @pytest.mark.asyncio
    async def test_missing_programs_file(self, reconciler, tmp_path, fixed_now):
        """Test that a missing programs file fails the run."""
        extractor = FoundationGrantsExtractor(
            reconciler,
            config_loader=ConfigLoader(str(tmp_path)),
            now=fixed_now,
        )
        with pytest.raises(ExtractorFetchError):
            await extractor.run()
