"""Tests for the ATS ground-truth generator."""

import json

import pytest

from ats_training.errors import DataNotLoadedError
from ats_training.models.schemas import (
    AtsScoreResult,
    CategoryResult,
    GenerationOptions,
)
from ats_training.services.cache import dump_records, write_json_atomic
from ats_training.services.ground_truth import (
    AtsGroundTruthGenerator,
    calculate_stats,
    extract_ground_truth,
    format_resume_for_ats,
)
from ats_training.services.score_engine import KeywordScoreEngine, ScoreEngine


class ScriptedEngine(ScoreEngine):
    """Returns the queued scores in call order; raises for queued exceptions."""

    engine_name = "scripted"

    def __init__(self, scores):
        self.scores = list(scores)
        self.calls = []

    def score(self, job_description_text, resume_text, resume_skills):
        self.calls.append((job_description_text, resume_text, resume_skills))
        item = self.scores[len(self.calls) - 1]
        if isinstance(item, Exception):
            raise item
        return {
            "final_score": item,
            "score_interpretation": "scripted",
            "category_breakdown": {
                "critical": {"score": item, "total_keywords": 4, "matched_count": 2,
                             "matched_terms": ["python", "sql"]},
                "important": {"score": 0, "total_keywords": 1, "matched_count": 0},
            },
            "strengths": [],
            "gaps": ["docker", "aws"],
        }


class FakeLoader:
    def __init__(self, resumes, jds):
        self.resumes = resumes
        self.jds = jds
        self.resume_calls = 0
        self.jd_calls = 0

    def load_resumes(self, options=None):
        self.resume_calls += 1
        return iter(self.resumes[:options.limit])

    def load_job_descriptions(self, options=None):
        self.jd_calls += 1
        return iter(self.jds[:options.limit])


@pytest.fixture
def pools(make_resume, make_jd):
    resumes = [make_resume(category="Engineer"), make_resume(category="Analyst")]
    jds = [make_jd(domain="Engineer"), make_jd(domain="Analyst"), make_jd(domain="IT")]
    return resumes, jds


def _generator(tmp_path, pools, engine, sleeps=None):
    resumes, jds = pools
    generator = AtsGroundTruthGenerator(
        loader=FakeLoader(resumes, jds),
        score_engine=engine,
        cache_dir=tmp_path / "cache",
        sleep=(sleeps.append if sleeps is not None else lambda _: None),
    )
    generator.resumes = list(resumes)
    generator.job_descriptions = list(jds)
    return generator


class TestGenerateGroundTruthPairs:
    def test_score_window_filters_pairs(self, tmp_path, make_resume, make_jd):
        # 5 scored pairs, 3 of them below 70
        resumes = [make_resume(category="Engineer")] * 5
        jds = [make_jd(domain="Engineer")]
        engine = ScriptedEngine([50, 85, 30, 70, 10])
        generator = _generator(tmp_path, (resumes, jds), engine)

        pairs = list(generator.generate_ground_truth_pairs(
            GenerationOptions(pairs_per_resume=1, min_score=70, max_score=100, delay_seconds=0)
        ))

        assert [p.ground_truth.ats_score for p in pairs] == [85, 70]
        assert [p.id for p in pairs] == ["pair-2", "pair-4"]
        assert generator.filtered_out == 3

    def test_requires_loaded_data(self, tmp_path):
        generator = AtsGroundTruthGenerator(
            loader=FakeLoader([], []), score_engine=ScriptedEngine([]), cache_dir=tmp_path
        )
        with pytest.raises(DataNotLoadedError):
            generator.generate_ground_truth_pairs()

    def test_engine_failures_are_skipped(self, tmp_path, pools, caplog):
        engine = ScriptedEngine([80, RuntimeError("engine down"), 90, 75, 60, 95])
        generator = _generator(tmp_path, pools, engine)

        pairs = list(generator.generate_ground_truth_pairs(GenerationOptions(delay_seconds=0)))

        assert len(pairs) == 5
        assert "pair-2" not in [p.id for p in pairs]
        assert generator.scoring_failures == 1
        assert "pair-2" in caplog.text

    def test_invalid_engine_output_is_a_failure(self, tmp_path, pools):
        engine = ScriptedEngine([150, 80, 80, 80, 80, 80])
        generator = _generator(tmp_path, pools, engine)
        pairs = list(generator.generate_ground_truth_pairs(GenerationOptions(delay_seconds=0)))
        assert len(pairs) == 5
        assert generator.scoring_failures == 1

    def test_delay_between_engine_calls(self, tmp_path, pools):
        sleeps = []
        engine = ScriptedEngine([80] * 6)
        generator = _generator(tmp_path, pools, engine, sleeps=sleeps)
        list(generator.generate_ground_truth_pairs(GenerationOptions(delay_seconds=0.25)))
        assert sleeps == [0.25] * 5

    def test_skips_resumes_without_content(self, tmp_path, pools, make_resume):
        resumes, jds = pools
        # Bypass validation to simulate a degenerate cached record
        empty = make_resume().model_copy(update={"experience": [], "skills": []})
        engine = ScriptedEngine([80] * 6)
        generator = _generator(tmp_path, ([empty, *resumes], jds), engine)

        pairs = list(generator.generate_ground_truth_pairs(GenerationOptions(delay_seconds=0)))
        assert len(pairs) == 6
        assert all(p.resume.skills for p in pairs)

    def test_deterministic_across_runs(self, tmp_path, pools):
        runs = []
        for _ in range(2):
            generator = _generator(tmp_path, pools, KeywordScoreEngine())
            runs.append([
                p.model_dump() for p in generator.generate_ground_truth_pairs(GenerationOptions(delay_seconds=0))
            ])
        assert runs[0] == runs[1]
        assert len(runs[0]) == 6

    def test_pairs_follow_matcher(self, tmp_path, pools):
        engine = ScriptedEngine([80] * 6)
        generator = _generator(tmp_path, pools, engine)
        pairs = list(generator.generate_ground_truth_pairs(GenerationOptions(delay_seconds=0)))
        assert pairs[0].job_description.domain == "Engineer"
        assert pairs[3].job_description.domain == "Analyst"
        assert pairs[0].expected_ats_score == 80
        assert pairs[0].is_good_match is True


class TestExtractGroundTruth:
    def test_derived_fields(self, make_resume, make_jd):
        result = AtsScoreResult(
            final_score=72,
            score_interpretation="Moderate Match (60-74%)",
            category_breakdown={
                "critical": CategoryResult(total_keywords=4, matched_count=3, matched_terms=["Python", "SQL", "AWS"]),
                "important": CategoryResult(total_keywords=6, matched_count=2, matched_terms=["SQL", "Kafka"]),
                "nice_to_have": CategoryResult(total_keywords=10, matched_count=10),
            },
            gaps=[f"gap{i}" for i in range(15)],
        )
        truth = extract_ground_truth("pair-9", make_resume(category=None), make_jd(domain=None), result)

        assert truth.pair_id == "pair-9"
        assert truth.keyword_coverage == pytest.approx(0.5)
        assert truth.critical_matched == 3
        assert truth.important_total == 6
        assert truth.matched_keywords == ["Python", "SQL", "AWS", "Kafka"]
        assert truth.missing_keywords == [f"gap{i}" for i in range(10)]
        assert truth.is_good_match is True
        assert truth.resume_category == "Unknown"
        assert truth.jd_domain == "Unknown"
        assert truth.score_interpretation == "Moderate Match (60-74%)"

    def test_empty_breakdown(self, make_resume, make_jd):
        result = AtsScoreResult(final_score=69.9, strengths=["3 keywords matched", "Clear layout"])
        truth = extract_ground_truth("pair-1", make_resume(), make_jd(), result)
        assert truth.keyword_coverage == 0
        assert truth.critical_total == 0
        assert truth.is_good_match is False
        assert truth.matched_keywords == ["3 keywords matched"]

    def test_pure(self, make_resume, make_jd):
        result = AtsScoreResult(final_score=50)
        resume, jd = make_resume(), make_jd()
        assert extract_ground_truth("p", resume, jd, result) == extract_ground_truth("p", resume, jd, result)


class TestCalculateStats:
    def test_buckets_and_mean(self):
        stats = calculate_stats([0, 20, 21, 40, 60.5, 80, 81, 100], good_match_count=3, processing_time_ms=12.5)
        assert stats.score_distribution == {"0-20": 2, "21-40": 2, "41-60": 0, "61-80": 2, "81-100": 2}
        assert stats.avg_score == 50.31
        assert stats.total_pairs == 8
        assert stats.good_match_count == 3

    def test_empty(self):
        stats = calculate_stats([], 0, 0.0)
        assert stats.avg_score == 0
        assert sum(stats.score_distribution.values()) == 0


class TestLoadData:
    def test_fetches_when_no_cache_and_does_not_write(self, tmp_path, pools):
        resumes, jds = pools
        loader = FakeLoader(resumes, jds)
        generator = AtsGroundTruthGenerator(loader=loader, score_engine=ScriptedEngine([]), cache_dir=tmp_path)

        generator.load_data(resume_limit=1, jd_limit=2)

        assert generator.resumes == resumes[:1]
        assert generator.job_descriptions == jds[:2]
        assert loader.resume_calls == 1
        assert list(tmp_path.iterdir()) == []

    def test_uses_cache_truncated_to_limit(self, tmp_path, pools):
        resumes, jds = pools
        write_json_atomic(tmp_path / "resumes.json", dump_records(resumes))
        write_json_atomic(tmp_path / "job-descriptions.json", dump_records(jds))
        loader = FakeLoader([], [])
        generator = AtsGroundTruthGenerator(loader=loader, score_engine=ScriptedEngine([]), cache_dir=tmp_path)

        generator.load_data(resume_limit=1, jd_limit=10)

        assert generator.resumes == resumes[:1]
        assert generator.job_descriptions == jds
        assert loader.resume_calls == loader.jd_calls == 0

    def test_corrupt_cache_is_removed_and_refetched(self, tmp_path, pools, caplog):
        resumes, jds = pools
        (tmp_path / "resumes.json").write_text("[{broken", encoding="utf-8")
        write_json_atomic(tmp_path / "job-descriptions.json", dump_records(jds))
        loader = FakeLoader(resumes, jds)
        generator = AtsGroundTruthGenerator(loader=loader, score_engine=ScriptedEngine([]), cache_dir=tmp_path)

        generator.load_data(resume_limit=5, jd_limit=5)

        assert generator.resumes == resumes
        assert loader.resume_calls == 1
        assert loader.jd_calls == 0
        assert not (tmp_path / "resumes.json").exists()
        assert "Corrupt cache file" in caplog.text

    def test_schema_invalid_cache_is_corrupt(self, tmp_path, pools):
        resumes, jds = pools
        (tmp_path / "job-descriptions.json").write_text('[{"title": "x", "description": "short"}]', encoding="utf-8")
        loader = FakeLoader(resumes, jds)
        generator = AtsGroundTruthGenerator(loader=loader, score_engine=ScriptedEngine([]), cache_dir=tmp_path)

        generator.load_data()

        assert generator.job_descriptions == jds
        assert loader.jd_calls == 1

    def test_binary_cache_is_removed_and_refetched(self, tmp_path, pools, caplog):
        resumes, jds = pools
        (tmp_path / "resumes.json").write_bytes(b"[\xff\xfe\x00garbage")
        loader = FakeLoader(resumes, jds)
        generator = AtsGroundTruthGenerator(loader=loader, score_engine=ScriptedEngine([]), cache_dir=tmp_path)

        generator.load_data(resume_limit=1, jd_limit=1)

        assert generator.resumes == resumes[:1]
        assert loader.resume_calls == 1
        assert not (tmp_path / "resumes.json").exists()
        assert "not UTF-8" in caplog.text

    def test_default_limits_follow_current_settings(self, tmp_path, pools, monkeypatch):
        from ats_training.config import settings

        monkeypatch.setattr(settings, "resume_limit", 1)
        monkeypatch.setattr(settings, "jd_limit", 2)
        resumes, jds = pools
        generator = AtsGroundTruthGenerator(
            loader=FakeLoader(resumes, jds), score_engine=ScriptedEngine([]), cache_dir=tmp_path
        )

        generator.load_data()

        assert generator.resumes == resumes[:1]
        assert generator.job_descriptions == jds[:2]

    def test_save_cache_round_trip(self, tmp_path, pools):
        resumes, jds = pools
        generator = _generator(tmp_path, pools, ScriptedEngine([]))
        generator.save_cache()

        reloaded = AtsGroundTruthGenerator(
            loader=FakeLoader([], []), score_engine=ScriptedEngine([]), cache_dir=tmp_path / "cache"
        )
        reloaded.load_data()
        assert reloaded.resumes == resumes
        assert reloaded.job_descriptions == jds


class TestGenerateDataset:
    def test_writes_artifact(self, tmp_path, pools):
        engine = ScriptedEngine([90, 65, 40, RuntimeError("boom"), 75, 10])
        generator = _generator(tmp_path, pools, engine)
        output = tmp_path / "out" / "ground-truth.json"

        stats = generator.generate_dataset(output, GenerationOptions(min_score=20, delay_seconds=0))

        assert stats.total_pairs == 4
        assert stats.good_match_count == 2
        assert stats.scoring_failures == 1
        assert stats.filtered_out == 1
        assert stats.avg_score == 67.5
        assert stats.processing_time_ms >= 0

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["metadata"]["stats"]["total_pairs"] == 4
        assert data["metadata"]["score_engine"]["name"] == "scripted"
        assert "generated_at" in data["metadata"]
        assert [p["id"] for p in data["pairs"]] == ["pair-1", "pair-2", "pair-3", "pair-5"]
        assert data["pairs"][0]["ground_truth"]["ats_score"] == 90
        assert data["pairs"][0]["job_description"]["description"]

    def test_failed_run_keeps_previous_artifact(self, tmp_path, pools):
        output = tmp_path / "ground-truth.json"
        output.write_text('{"previous": true}', encoding="utf-8")
        generator = _generator(tmp_path, pools, ScriptedEngine([80] * 6))
        generator.resumes = []

        with pytest.raises(DataNotLoadedError):
            generator.generate_dataset(output)
        assert json.loads(output.read_text(encoding="utf-8")) == {"previous": True}


def test_format_resume_for_ats(make_resume):
    resume = make_resume(
        summary="Engineer with 8 years of experience building data platforms for finance.",
        education=[{"institution": "MIT", "degree": "BS", "field": "Physics", "end_date": "2012"}],
        certifications=[{"name": "AWS Solutions Architect", "issuer": "Amazon", "date": "2021"}],
    )
    text = format_resume_for_ats(resume)
    assert text.startswith("PROFESSIONAL SUMMARY\nEngineer with 8 years")
    assert "Senior Engineer | Acme Corp" in text
    assert "• Led a team of 5 engineers" in text
    assert "SKILLS\npython, sql" in text
    assert "BS in Physics | MIT" in text
    assert "AWS Solutions Architect - Amazon (2021)" in text
