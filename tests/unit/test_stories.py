"""Unit tests for story synthesis and normalization."""

import pytest

from conceptgen.llm.oracle import OracleTransportError
from conceptgen.models import ConceptModel, IssueKind, StoryDesign, StoryView
from conceptgen.pipeline.nodes.stories import curate_stories, synthesize_stories_node
from conceptgen.processing import check_story_bounds, normalize_story


@pytest.fixture
def model(enriched_model_dict) -> ConceptModel:
    return ConceptModel.model_validate(enriched_model_dict)


@pytest.fixture
def story(stories_response) -> StoryView:
    return StoryDesign.model_validate(stories_response).story_views[0]


class TestNormalizeStory:
    """Tests for normalize_story."""

    def test_steps_renumbered_by_position(self, story, model):
        normalized, _ = normalize_story(story, model)
        assert [s.index for s in normalized.steps] == [0, 1]
        assert [s.id for s in normalized.steps] == ["place", "pay"]

    def test_primary_subset_restricted(self, story, model):
        normalized, issues = normalize_story(story, model)

        assert normalized.steps[1].primary_concept_ids == ["payment"]
        assert issues == []

    def test_dangling_step_ids_dropped(self, model):
        story = StoryView.model_validate({
            "id": "s",
            "name": "S",
            "steps": [{
                "id": "a",
                "title": "A",
                "conceptIds": ["order", "ghost"],
                "relationshipIds": ["nope"],
                "primaryConceptIds": ["ghost"],
            }],
        })
        normalized, issues = normalize_story(story, model)

        step = normalized.steps[0]
        assert step.concept_ids == ["order"]
        assert step.relationship_ids == []
        assert step.primary_concept_ids == []
        assert {i.details["missingId"] for i in issues} == {"ghost", "nope"}
        assert all(i.subject_id == "s/a" for i in issues)

    def test_dangling_focus_cleared(self, model):
        story = StoryView(id="s", name="S", focus_concept_id="warehouse")
        normalized, issues = normalize_story(story, model)

        assert normalized.focus_concept_id is None
        assert issues[0].details["field"] == "story.focusConceptId"

    def test_known_focus_kept(self, story, model):
        normalized, _ = normalize_story(story, model)
        assert normalized.focus_concept_id == "order"


class TestCheckStoryBounds:
    """Tests for check_story_bounds."""

    def test_too_few_steps(self, story, model):
        normalized, _ = normalize_story(story, model)
        issues = check_story_bounds(normalized, model.id)

        assert [i.details["field"] for i in issues] == ["steps"]
        assert issues[0].kind == IssueKind.STORY_BOUNDS

    def test_step_sizes(self):
        story = StoryView.model_validate({
            "id": "s",
            "name": "S",
            "steps": [
                {"id": "a", "title": "A", "conceptIds": ["x"], "relationshipIds": ["r"]},
                {"id": "b", "title": "B", "conceptIds": ["x", "y"], "relationshipIds": []},
                {"id": "c", "title": "C", "conceptIds": ["x", "y"], "relationshipIds": ["r"]},
            ],
        })
        issues = check_story_bounds(story, "m")

        assert [(i.subject_id, i.details["field"]) for i in issues] == [
            ("s/a", "concepts"),
            ("s/b", "relationships"),
        ]


class TestSynthesizeStoriesNode:
    """Tests for synthesize_stories_node."""

    def test_stories_stored_normalized(self, stub_oracle_factory, model, stories_response):
        oracle = stub_oracle_factory([stories_response])
        state = {"skeleton": {"name": "Shop"}, "models": [model.to_dict()], "llm_calls_count": 4}

        result = synthesize_stories_node(state, oracle=oracle)

        stories = result["models"][0]["storyViews"]
        assert [s["index"] for s in stories[0]["steps"]] == [0, 1]
        assert result["llm_calls_count"] == 5
        kinds = {i["kind"] for i in result["integrity_issues"]}
        assert kinds == {IssueKind.STORY_BOUNDS.value}

    def test_failure_leaves_model_without_stories(self, stub_oracle_factory, model):
        oracle = stub_oracle_factory([OracleTransportError("timeout")])
        state = {"models": [model.to_dict()]}

        result = synthesize_stories_node(state, oracle=oracle)

        assert result["models"][0]["storyViews"] == []
        assert result["warnings"][0]["stage"] == "stories"

    def test_story_count_flagged(self, story, model):
        _, issues = curate_stories([story], model)
        assert any(i.details.get("field") == "storyViews" for i in issues)
