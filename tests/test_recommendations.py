"""Tests for breeding recommendation generation and caching."""

import asyncio

import httpx
import pytest

from farmika.core.client import AuthenticationError, RetryableError
from farmika.pedigree.kinship import KinshipResult
from farmika.pedigree.models import Animal
from farmika.pedigree.recommendations import (
    RecommendationCache,
    build_recommendations,
    candidate_pairs,
    compatibility_score,
    generate_recommendations,
    invalidate_recommendations,
)


def make_animal(
    animal_id: str,
    gender: str,
    species: str = "donkey",
    status: str = "active",
    health: str | None = "healthy",
    **slots,
) -> Animal:
    return Animal(
        id=animal_id,
        name=animal_id.capitalize(),
        species=species,
        gender=gender,
        lifecycle_status=status,
        health_status=health,
        pedigree=slots,
    )


def kinship(risk: str = "low") -> KinshipResult:
    return KinshipResult(coefficient=0.0, percentage=0.0, risk_level=risk)


@pytest.fixture
def population() -> list[Animal]:
    """Jazz is the sire of Cria; Shiva is Cria's dam. Thor is deceased."""
    return [
        make_animal("shiva", "hembra"),
        make_animal("luna", "female", health=None),
        make_animal("jazz", "macho"),
        make_animal("cria", "M", mother_id="shiva", father_id="Jazz"),
        make_animal("thor", "male", status="deceased"),
        make_animal("bruno", "male", species="horse"),
    ]


def counting_fetcher(animals: list[Animal]):
    calls = {"count": 0}

    async def fetch():
        calls["count"] += 1
        await asyncio.sleep(0)
        return animals

    return fetch, calls


class TestCompatibilityScore:
    def test_healthy_low_risk_same_species(self):
        male = make_animal("m", "male")
        female = make_animal("f", "female")
        # 50 + 30 + 20 + 10, clamped
        assert compatibility_score(male, female, kinship("low")) == 100

    def test_good_health_moderate_risk(self):
        male = make_animal("m", "male", health="good")
        female = make_animal("f", "female", health="healthy")
        # 50 + 20 - 10 + 10
        assert compatibility_score(male, female, kinship("moderate")) == 70

    def test_sick_and_high_risk_clamped_at_zero(self):
        male = make_animal("m", "male", health="sick")
        female = make_animal("f", "female", health="treatment")
        # 50 - 40 + 10 - 20 - 15
        assert compatibility_score(male, female, kinship("high")) == 0

    def test_unknown_health_is_stable(self):
        male = make_animal("m", "male", health=None)
        female = make_animal("f", "female", health=None)
        # 50 + 10 + 20 + 10
        assert compatibility_score(male, female, kinship("low")) == 90


class TestCandidatePairs:
    def test_opposite_sex_same_species_active_only(self, population):
        pairs = {(m.id, f.id) for m, f in candidate_pairs(population)}

        assert pairs == {
            ("jazz", "shiva"),
            ("jazz", "luna"),
            ("cria", "shiva"),
            ("cria", "luna"),
        }

    def test_missing_species_never_pairs(self):
        animals = [make_animal("m", "male", species=None), make_animal("f", "female", species=None)]
        assert candidate_pairs(animals) == []


class TestBuildRecommendations:
    def test_blocked_pairs_removed(self, population):
        results = build_recommendations(population, max_depth=2)

        pairs = {(r.male_id, r.female_id) for r in results}
        assert ("cria", "shiva") not in pairs  # mother and son
        assert pairs == {("jazz", "shiva"), ("jazz", "luna"), ("cria", "luna")}

    def test_sorted_by_score(self, population):
        results = build_recommendations(population, max_depth=2)

        scores = [r.compatibility_score for r in results]
        assert scores == sorted(scores, reverse=True)
        # Luna has no health record so her pairs rank below Shiva's
        assert results[0].female_id == "shiva"
        assert [r.male_id for r in results[1:]] == ["cria", "jazz"]

    def test_deceased_ancestor_still_resolves(self):
        """Half-siblings by a deceased sire recorded by name are still blocked."""
        animals = [
            make_animal("thor", "male", status="deceased"),
            make_animal("colt", "male", father_id="Thor"),
            make_animal("filly", "female", father_id="THOR"),
        ]

        results = build_recommendations(animals, max_depth=2)

        assert results == []

    def test_depth_one_skips_grandparent_block(self):
        animals = [make_animal("old", "male"), make_animal("filly", "female", paternal_grandfather_id="Old")]

        assert build_recommendations(animals, max_depth=1)[0].male_id == "old"
        assert build_recommendations(animals, max_depth=2) == []

    def test_custom_scorer(self, population):
        def prefer_luna(male, female, kinship):
            return 99 if female.id == "luna" else 1

        results = build_recommendations(population, max_depth=2, scorer=prefer_luna)

        assert [r.female_id for r in results[:2]] == ["luna", "luna"]
        assert results[0].compatibility_score == 99

    def test_limit(self, population):
        assert len(build_recommendations(population, max_depth=2, limit=2)) == 2

    def test_to_dict_uses_camel_case(self, population):
        result = build_recommendations(population, max_depth=2)[0].to_dict()

        assert result["id"] == f"{result['maleId']}-{result['femaleId']}"
        assert {"maleName", "femaleName", "compatibilityScore", "inbreedingRisk", "notes"} <= set(result)

    def test_shared_ancestor_reported_in_notes(self):
        animals = [
            make_animal("m", "male", paternal_grandmother_id="Rosa"),
            make_animal("f", "female", maternal_grandmother_id="Rosa"),
        ]

        [result] = build_recommendations(animals, max_depth=4)

        assert result.inbreeding_risk == "moderate"
        assert any("Rosa" in note for note in result.notes)

    def test_no_females_returns_empty(self):
        assert build_recommendations([make_animal("m", "male")], max_depth=2) == []


class TestGenerateRecommendations:
    async def test_default_depth_by_environment(self, population, monkeypatch):
        seen = []

        import farmika.pedigree.recommendations as recs

        real_build = recs.build_recommendations

        def spy(animals, max_depth, scorer=None, limit=None):
            seen.append(max_depth)
            return real_build(animals, max_depth, scorer=scorer, limit=limit)

        monkeypatch.setattr(recs, "build_recommendations", spy)
        fetch, _ = counting_fetcher(population)

        await generate_recommendations(environment_class="constrained", fetch_animals=fetch)
        await generate_recommendations(environment_class="unconstrained", fetch_animals=fetch)
        await generate_recommendations(max_depth=3, environment_class="constrained", fetch_animals=fetch)

        assert seen == [2, 4, 3]

    async def test_results_cached_per_key(self, population):
        fetch, calls = counting_fetcher(population)

        first = await generate_recommendations(max_depth=2, fetch_animals=fetch)
        second = await generate_recommendations(max_depth=2, fetch_animals=fetch)
        await generate_recommendations(max_depth=4, fetch_animals=fetch)

        assert [r.id for r in first] == [r.id for r in second]
        assert calls["count"] == 2

    async def test_invalidate_forces_recompute(self, population):
        fetch, calls = counting_fetcher(population)

        await generate_recommendations(max_depth=2, fetch_animals=fetch)
        invalidate_recommendations()
        await generate_recommendations(max_depth=2, fetch_animals=fetch)

        assert calls["count"] == 2

    async def test_concurrent_calls_coalesce(self, population):
        fetch, calls = counting_fetcher(population)

        results = await asyncio.gather(
            *(generate_recommendations(max_depth=2, fetch_animals=fetch) for _ in range(5))
        )

        assert calls["count"] == 1
        assert all([r.id for r in res] == [r.id for r in results[0]] for res in results)

    async def test_custom_scorer_without_key_is_not_cached(self, population):
        fetch, calls = counting_fetcher(population)
        cache = RecommendationCache()

        for _ in range(5):
            await generate_recommendations(
                max_depth=2, scorer=lambda m, f, k: 1, fetch_animals=fetch, cache=cache
            )

        assert calls["count"] == 5
        assert len(cache) == 0

    async def test_custom_scorer_cached_under_scorer_key(self, population):
        fetch, calls = counting_fetcher(population)
        cache = RecommendationCache()

        for _ in range(3):
            results = await generate_recommendations(
                max_depth=2,
                scorer=lambda m, f, k: 99 if f.id == "luna" else 1,
                scorer_key="prefer-luna",
                fetch_animals=fetch,
                cache=cache,
            )
        default = await generate_recommendations(max_depth=2, fetch_animals=fetch, cache=cache)

        assert calls["count"] == 2
        assert len(cache) == 2
        assert results[0].compatibility_score == 99
        assert default[0].female_id == "shiva"

    async def test_explicit_depth_zero_is_rejected(self, population):
        fetch, calls = counting_fetcher(population)

        with pytest.raises(ValueError):
            await generate_recommendations(max_depth=0, fetch_animals=fetch)

        assert calls["count"] == 0

    async def test_depth_above_five_is_rejected(self, population):
        fetch, _ = counting_fetcher(population)

        with pytest.raises(ValueError):
            await generate_recommendations(max_depth=6, fetch_animals=fetch)

    async def test_fetch_error_propagates(self):
        async def failing_fetch():
            raise RetryableError("HTTP 503: unavailable")

        with pytest.raises(RetryableError):
            await generate_recommendations(max_depth=2, fetch_animals=failing_fetch)

    async def test_failed_computation_not_cached(self, population):
        attempts = {"count": 0}

        async def flaky_fetch():
            attempts["count"] += 1
            if attempts["count"] == 1:
                raise RetryableError("Connection failed")
            return population

        with pytest.raises(RetryableError):
            await generate_recommendations(max_depth=2, fetch_animals=flaky_fetch)
        results = await generate_recommendations(max_depth=2, fetch_animals=flaky_fetch)

        assert len(results) == 3

    async def test_reads_population_from_backend(self, mock_backend, sample_animal_rows):
        mock_backend.get("/animals").mock(return_value=httpx.Response(200, json=sample_animal_rows))

        results = await generate_recommendations(max_depth=2)

        pairs = {(r.male_name, r.female_name) for r in results}
        # CRIA x SHIVA is mother-son; THOR is deceased
        assert pairs == {("JAZZ", "SHIVA"), ("JAZZ", "LUNA"), ("CRIA DE SHIVA Y JAZZ", "LUNA")}

    async def test_auth_error_propagates_distinctly(self, mock_backend):
        mock_backend.get("/animals").mock(return_value=httpx.Response(401, json={"message": "JWT expired"}))

        with pytest.raises(AuthenticationError):
            await generate_recommendations(max_depth=2)

        assert mock_backend.calls.call_count == 1


class TestRecommendationCache:
    async def test_invalidate_during_computation_discards_result(self):
        cache = RecommendationCache()
        release = asyncio.Event()

        async def slow_compute():
            await release.wait()
            return ["stale"]

        pending = asyncio.ensure_future(cache.get_or_compute("k", slow_compute))
        await asyncio.sleep(0)
        cache.invalidate()
        release.set()

        assert await pending == ["stale"]
        assert "k" not in cache

    async def test_abandoned_caller_does_not_cancel_shared_work(self):
        cache = RecommendationCache()
        release = asyncio.Event()

        async def slow_compute():
            await release.wait()
            return ["fresh"]

        abandoned = asyncio.ensure_future(cache.get_or_compute("k", slow_compute))
        waiting = asyncio.ensure_future(cache.get_or_compute("k", slow_compute))
        await asyncio.sleep(0)
        abandoned.cancel()
        release.set()

        assert await waiting == ["fresh"]
        assert "k" in cache

    async def test_returns_copies(self):
        cache = RecommendationCache()

        async def compute():
            return [1, 2]

        first = await cache.get_or_compute("k", compute)
        first.append(3)

        assert await cache.get_or_compute("k", compute) == [1, 2]
