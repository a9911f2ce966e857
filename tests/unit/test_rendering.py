"""Unit tests for concept sheet rendering."""

from conceptgen.models import ConceptSheet
from conceptgen.rendering import NONE_INFERRED, render_concept_sheet, slugify


class TestSlugify:
    """Tests for slugify."""

    def test_basic(self):
        assert slugify("Order Line") == "order-line"

    def test_punctuation_collapsed(self):
        assert slugify("  Payment / Refund (v2) ") == "payment-refund-v2"

    def test_empty_fallback(self):
        assert slugify("???") == "concept"


class TestRenderConceptSheet:
    """Tests for render_concept_sheet."""

    def test_minimal_sheet(self):
        text = render_concept_sheet(ConceptSheet.model_validate({"metadata": {"name": "Order"}}))

        assert text.startswith("# Order\n\n**Type:** other")
        assert "## 1. Definition" in text
        assert "## 2. Structure" in text
        assert text.count(NONE_INFERRED) == 2
        assert "## 3. Lifecycle" not in text
        assert "## 7. Implementation" not in text

    def test_full_sheet(self):
        sheet = ConceptSheet.model_validate({
            "metadata": {
                "name": "Order",
                "type": "aggregate_root",
                "boundedContext": "Sales",
                "aggregateRoot": True,
                "criticality": "core",
            },
            "definition": {"shortDescription": "A purchase", "ubiquitousLanguage": "Basket once paid"},
            "structure": {
                "fields": [{"name": "total", "type": "Decimal", "description": "Sum of lines"}, {"name": "id"}],
                "relationships": [{"description": "Has many OrderLines", "target": "OrderLine"}],
            },
            "lifecycle": {"states": ["draft", "paid"], "validTransitions": ["draft -> paid"]},
            "invariants": [{"rule": "Total is positive", "notes": "checked on save"}, {"rule": "Has lines"}],
            "commands": [{"name": "PlaceOrder", "description": "Submit the basket"}],
            "events": [{"name": "OrderPlaced"}],
            "implementation": [
                {"kind": "file", "label": "Model", "path": "src/orders.py"},
                {"kind": "url", "label": "Docs", "path": "https://example.com/orders"},
            ],
        })
        text = render_concept_sheet(sheet)

        assert "**Bounded Context:** Sales" in text
        assert "**Aggregate Root:** Yes" in text
        assert "**Criticality:** core" in text
        assert "**Ubiquitous Language:**" in text
        assert "- `total: Decimal`: Sum of lines" in text
        assert "- `id: unknown`" in text
        assert "- Has many OrderLines" in text
        assert "- `draft -> paid`" in text
        assert "- **Total is positive** (checked on save)" in text
        assert "- **Has lines**" in text
        assert "## 5. Commands" in text
        assert "- **PlaceOrder**: Submit the basket" in text
        assert "- **OrderPlaced**" in text
        assert "- **Model:** `src/orders.py`" in text
        assert "- **Docs:** https://example.com/orders" in text
        assert NONE_INFERRED not in text

    def test_sections_in_order(self):
        sheet = ConceptSheet.model_validate({
            "metadata": {"name": "Order"},
            "lifecycle": {"states": ["draft"]},
            "invariants": [{"rule": "r"}],
            "events": [{"name": "e"}],
            "implementation": [{"label": "l", "path": "p"}],
        })
        text = render_concept_sheet(sheet)

        headings = [line for line in text.splitlines() if line.startswith("## ")]
        assert headings == [
            "## 1. Definition",
            "## 2. Structure",
            "## 3. Lifecycle",
            "## 4. Invariants",
            "## 6. Events",
            "## 7. Implementation",
        ]
