"""Unit tests for bounded-context rationalization."""

from conceptgen.llm.oracle import OracleTransportError
from conceptgen.models import ConceptModel, ConceptSheet
from conceptgen.pipeline.nodes.rationalization import rationalize_models_node
from conceptgen.processing import apply_label_map, propose_label_map, relabel_models, relabel_sheets
from conceptgen.processing.rationalization import model_labels

FINANCE_PROPOSAL = {
    "boundedContexts": [
        {"name": "Finance", "description": "Money movement", "concepts": ["a", "b", "c"]},
    ]
}


def _sheet(name: str, context: str | None) -> ConceptSheet:
    return ConceptSheet.model_validate({"metadata": {"name": name, "boundedContext": context}})


class TestApplyLabelMap:
    """Tests for apply_label_map."""

    def test_fragmented_labels_consolidated(self):
        labels = {"a": "Billing", "b": "Billing", "c": "Payments"}
        result = apply_label_map(labels, {"a": "Finance", "b": "Finance", "c": "Finance"})
        assert result == {"a": "Finance", "b": "Finance", "c": "Finance"}

    def test_unmapped_names_keep_label(self):
        result = apply_label_map({"a": "Billing", "d": "Shipping"}, {"a": "Finance"})
        assert result == {"a": "Finance", "d": "Shipping"}

    def test_idempotent(self):
        labels = {"a": "Billing", "b": None, "c": "Payments"}
        label_map = {"a": "Finance", "b": "Finance"}

        once = apply_label_map(labels, label_map)
        assert apply_label_map(once, label_map) == once

    def test_names_absent_from_labels_ignored(self):
        assert apply_label_map({"a": "Billing"}, {"z": "Finance"}) == {"a": "Billing"}


class TestProposeLabelMap:
    """Tests for propose_label_map."""

    def test_scenario(self, stub_oracle_factory):
        oracle = stub_oracle_factory([FINANCE_PROPOSAL])
        labels = {"a": "Billing", "b": "Billing", "c": "Payments"}

        label_map = propose_label_map(oracle, labels)

        assert apply_label_map(labels, label_map) == {"a": "Finance", "b": "Finance", "c": "Finance"}

    def test_unclassified_placeholder(self, stub_oracle_factory):
        oracle = stub_oracle_factory([{"boundedContexts": []}])
        propose_label_map(oracle, {"a": None}, {"a": "Thing A"})

        prompt = oracle.user_prompt(0)
        assert '"boundedContext": "(unclassified)"' in prompt
        assert '"description": "Thing A"' in prompt


class TestRelabelSheets:
    """Tests for relabel_sheets."""

    def test_sheets_relabeled(self):
        sheets = [_sheet("a", "Billing"), _sheet("b", "Billing"), _sheet("c", "Payments")]
        relabeled = relabel_sheets(sheets, {"a": "Finance", "b": "Finance", "c": "Finance"})

        assert [s.metadata.bounded_context for s in relabeled] == ["Finance"] * 3
        assert sheets[0].metadata.bounded_context == "Billing"


class TestRelabelModels:
    """Tests for staged-model relabeling."""

    def test_model_title_is_initial_label(self, enriched_model_dict):
        model = ConceptModel.model_validate(enriched_model_dict)
        assert set(model_labels([model]).values()) == {"Ordering"}

    def test_relabel(self, enriched_model_dict):
        model = ConceptModel.model_validate(enriched_model_dict)
        relabeled = relabel_models([model], {"Order": "Sales"})

        contexts = {c.label: c.bounded_context for c in relabeled[0].concepts}
        assert contexts == {"Order": "Sales", "Payment": "Ordering", "Customer": "Ordering"}

    def test_shared_label_across_models_keeps_own_context(self):
        sales = ConceptModel.model_validate({
            "id": "sales",
            "title": "Sales",
            "concepts": [{"id": "order", "label": "Order"}],
        })
        shipping = ConceptModel.model_validate({
            "id": "shipping",
            "title": "Shipping",
            "concepts": [{"id": "order", "label": "Order"}, {"id": "parcel", "label": "Parcel"}],
        })

        assert model_labels([sales, shipping]) == {
            "Sales / Order": "Sales",
            "Shipping / Order": "Shipping",
            "Parcel": "Shipping",
        }

        unchanged = relabel_models([sales, shipping], {})
        assert [c.bounded_context for m in unchanged for c in m.concepts] == ["Sales", "Shipping", "Shipping"]

        partial = relabel_models([sales, shipping], {"Shipping / Order": "Fulfilment"})
        assert [c.bounded_context for m in partial for c in m.concepts] == ["Sales", "Fulfilment", "Shipping"]

    def test_node_sends_qualified_names(self, stub_oracle_factory):
        sales = ConceptModel.model_validate({
            "id": "sales",
            "title": "Sales",
            "concepts": [{"id": "order", "label": "Order", "description": "A purchase"}],
        })
        shipping = ConceptModel.model_validate({
            "id": "shipping",
            "title": "Shipping",
            "concepts": [{"id": "order", "label": "Order", "description": "A shipment request"}],
        })
        oracle = stub_oracle_factory([
            {"boundedContexts": [{"name": "Commerce", "concepts": ["Sales / Order"]}]},
        ])

        result = rationalize_models_node({"models": [sales.to_dict(), shipping.to_dict()]}, oracle=oracle)

        prompt = oracle.user_prompt(0)
        assert '"name": "Sales / Order"' in prompt
        assert '"description": "A shipment request"' in prompt
        contexts = [c["boundedContext"] for m in result["models"] for c in m["concepts"]]
        assert contexts == ["Commerce", "Shipping"]

    def test_node_scenario(self, stub_oracle_factory):
        billing = ConceptModel.model_validate({
            "id": "billing",
            "title": "Billing",
            "concepts": [{"id": "a", "label": "a"}, {"id": "b", "label": "b"}],
        })
        payments = ConceptModel.model_validate({
            "id": "payments",
            "title": "Payments",
            "concepts": [{"id": "c", "label": "c"}],
        })
        oracle = stub_oracle_factory([FINANCE_PROPOSAL])
        state = {"models": [billing.to_dict(), payments.to_dict()], "llm_calls_count": 2}

        result = rationalize_models_node(state, oracle=oracle)

        contexts = [c["boundedContext"] for m in result["models"] for c in m["concepts"]]
        assert contexts == ["Finance", "Finance", "Finance"]
        assert result["llm_calls_count"] == 3

    def test_node_failure_is_soft(self, stub_oracle_factory, enriched_model_dict):
        oracle = stub_oracle_factory([OracleTransportError("down")])
        state = {"models": [enriched_model_dict]}

        result = rationalize_models_node(state, oracle=oracle)

        assert "models" not in result
        assert result["warnings"][0]["stage"] == "rationalization"

    def test_node_without_concepts(self, stub_oracle_factory):
        oracle = stub_oracle_factory([])
        assert rationalize_models_node({"models": []}, oracle=oracle) == {}
        assert oracle.calls == []
