"""Unit tests for view synthesis and curation."""

import pytest

from conceptgen.llm.oracle import OracleSchemaError
from conceptgen.models import ConceptModel, IssueKind, ModelView
from conceptgen.pipeline.nodes.views import curate_views, synthesize_views_node
from conceptgen.processing import check_view_bounds, prune_view


@pytest.fixture
def large_model() -> ConceptModel:
    """Twenty concepts chained by fifteen relationships."""
    concepts = [{"id": f"c{i}", "label": f"Concept {i}"} for i in range(20)]
    relationships = [{"id": f"r{i}", "from": f"c{i}", "to": f"c{i + 1}"} for i in range(15)]
    return ConceptModel.model_validate({
        "id": "big",
        "title": "Big",
        "concepts": concepts,
        "relationships": relationships,
    })


@pytest.fixture
def model(enriched_model_dict) -> ConceptModel:
    return ConceptModel.model_validate(enriched_model_dict)


class TestOversizedView:
    """A view beyond the size contract is stored and flagged."""

    def test_ten_concept_view_kept_and_flagged(self, stub_oracle_factory, large_model):
        view = {
            "id": "everything",
            "name": "Everything",
            "kind": "overview",
            "conceptIds": [f"c{i}" for i in range(10)],
            "relationshipIds": [f"r{i}" for i in range(6)],
        }
        oracle = stub_oracle_factory([{"views": [view]}])
        state = {"skeleton": {"name": "Shop"}, "models": [large_model.to_dict()], "llm_calls_count": 1}

        result = synthesize_views_node(state, oracle=oracle)

        stored = result["models"][0]["views"]
        assert len(stored) == 1
        assert len(stored[0]["conceptIds"]) == 10

        bounds = [
            i for i in result["integrity_issues"]
            if i["kind"] == IssueKind.VIEW_BOUNDS.value and i["subject_id"] == "everything"
        ]
        assert len(bounds) == 1
        assert bounds[0]["details"] == {"field": "concepts", "count": 10, "min": 4, "max": 8}
        assert result["llm_calls_count"] == 2

    def test_view_count_flagged(self, large_model):
        views = [
            ModelView(
                id="only",
                name="Only",
                concept_ids=["c0", "c1", "c2", "c3"],
                relationship_ids=["r0", "r1", "r2", "r3"],
            )
        ]
        curated, issues = curate_views(views, large_model)

        assert len(curated) == 1
        assert [i.details["field"] for i in issues] == ["views"]


class TestPruneView:
    """Tests for prune_view."""

    def test_dangling_ids_dropped_and_reported(self, model):
        view = ModelView(
            id="v",
            name="V",
            concept_ids=["order", "ghost", "order", "payment"],
            relationship_ids=["order-paid-by", "missing-rel"],
        )
        pruned, issues = prune_view(view, model)

        assert pruned.concept_ids == ["order", "payment"]
        assert pruned.relationship_ids == ["order-paid-by"]
        assert {(i.kind, i.details["missingId"]) for i in issues} == {
            (IssueKind.DANGLING_CONCEPT, "ghost"),
            (IssueKind.DANGLING_RELATIONSHIP, "missing-rel"),
        }

    def test_close_match_suggested(self, model):
        view = ModelView(id="v", name="V", concept_ids=["orders"])
        _, issues = prune_view(view, model)
        assert issues[0].details["suggestion"] == "order"

    def test_no_suggestion_for_unrelated_id(self, model):
        view = ModelView(id="v", name="V", concept_ids=["warehouse"])
        _, issues = prune_view(view, model)
        assert "suggestion" not in issues[0].details

    def test_layout_groups_disjoint(self, model, views_response):
        view = ModelView.model_validate(views_response["views"][0])
        pruned, issues = prune_view(view, model)

        groups = {g.id: g.concept_ids for g in pruned.layout.groups}
        assert groups == {"buy": ["order", "customer"], "pay": ["payment"]}
        assert [i.details["missingId"] for i in issues] == ["ghost"]

    def test_group_members_must_be_in_view(self, model):
        view = ModelView.model_validate({
            "id": "v",
            "name": "V",
            "conceptIds": ["order"],
            "layout": {"groups": [{"id": "g", "conceptIds": ["order", "payment"]}]},
        })
        pruned, issues = prune_view(view, model)

        assert pruned.layout.groups[0].concept_ids == ["order"]
        assert issues == []

    def test_input_view_unchanged(self, model):
        view = ModelView(id="v", name="V", concept_ids=["order", "ghost"])
        prune_view(view, model)
        assert view.concept_ids == ["order", "ghost"]


class TestCheckViewBounds:
    """Tests for check_view_bounds."""

    def test_within_bounds(self):
        view = ModelView(
            id="v",
            name="V",
            concept_ids=["a", "b", "c", "d"],
            relationship_ids=["r1", "r2", "r3", "r4"],
        )
        assert check_view_bounds(view, "m") == []

    def test_group_count_checked(self):
        view = ModelView.model_validate({
            "id": "v",
            "name": "V",
            "conceptIds": ["a", "b", "c", "d"],
            "relationshipIds": ["r1", "r2", "r3", "r4"],
            "layout": {"groups": [{"id": "only"}]},
        })
        issues = check_view_bounds(view, "m")
        assert [i.details["field"] for i in issues] == ["groups"]


class TestSynthesizeViewsNode:
    """Tests for synthesize_views_node."""

    def test_failure_leaves_model_without_views(self, stub_oracle_factory, model):
        oracle = stub_oracle_factory([OracleSchemaError("bad shape")])
        state = {"skeleton": {"name": "Shop"}, "models": [model.to_dict()], "llm_calls_count": 0}

        result = synthesize_views_node(state, oracle=oracle)

        assert result["models"][0]["views"] == []
        assert result["models"][0]["concepts"] == model.to_dict()["concepts"]
        assert result["warnings"][0]["stage"] == "views"
        assert result["integrity_issues"] == []

    def test_each_model_gets_one_call(self, stub_oracle_factory, model, views_response):
        second = model.model_copy(update={"id": "other"})
        oracle = stub_oracle_factory([views_response, views_response])
        state = {"models": [model.to_dict(), second.to_dict()]}

        result = synthesize_views_node(state, oracle=oracle)

        assert len(oracle.calls) == 2
        assert [m["id"] for m in result["models"]] == ["ordering", "other"]
        assert result["models"][1]["views"][0]["conceptIds"] == ["order", "payment", "customer"]
