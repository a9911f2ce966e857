"""Pytest configuration and fixtures."""

import copy
from pathlib import Path

import pytest

from conceptgen.config import Settings
from conceptgen.llm.oracle import OracleMessage, OracleTransportError


class StubOracle:
    """Scripted stand-in for the generation service.

    Each ``generate`` call pops the next scripted response. Exceptions in the
    script are raised instead of returned. Every request is recorded.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls: list[tuple[list[OracleMessage], str]] = []

    def generate(self, messages, response_format="text"):
        self.calls.append((list(messages), response_format))
        if not self.responses:
            raise OracleTransportError("stub oracle has no scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)

    def user_prompt(self, call_index: int) -> str:
        return self.calls[call_index][0][-1].content


@pytest.fixture
def stub_oracle_factory():
    """Build a StubOracle from a list of scripted responses."""
    return StubOracle


@pytest.fixture
def settings() -> Settings:
    return Settings(source_dir="src", source_extensions=[".py"], snippet_max_files=30, snippet_max_chars=2000)


@pytest.fixture
def sample_repo(tmp_path: Path) -> Path:
    """A small repository with a .gitignore, an ignored directory and a broken file."""
    root = tmp_path / "shop-repo"
    shop = root / "src" / "shop"
    (shop / "build").mkdir(parents=True)

    (root / ".gitignore").write_text("# generated\nbuild/\n*.log\n", encoding="utf-8")
    (root / "README.md").write_text("# Shop\n", encoding="utf-8")

    (shop / "orders.py").write_text(
        '"""Orders."""\n'
        "\n"
        "_CACHE = {}\n"
        "\n"
        "\n"
        "class Order:\n"
        "    pass\n"
        "\n"
        "\n"
        "class OrderLine:\n"
        "    pass\n"
        "\n"
        "\n"
        "def place_order(cart):\n"
        "    return Order()\n",
        encoding="utf-8",
    )
    (shop / "payments.py").write_text(
        '__all__ = ["Payment"]\n'
        "\n"
        "\n"
        "class Payment:\n"
        "    amount: int = 0\n"
        "\n"
        "\n"
        "class PaymentGateway:\n"
        "    pass\n",
        encoding="utf-8",
    )
    (shop / "build" / "generated.py").write_text("class Generated:\n    pass\n", encoding="utf-8")
    (shop / "debug.log").write_text("noise\n", encoding="utf-8")
    (root / "src" / "broken.py").write_text("def oops(:\n", encoding="utf-8")
    return root


@pytest.fixture
def discovery_response() -> dict:
    """Skeleton project as the oracle would return it."""
    return {
        "id": "shop",
        "name": "Shop",
        "summary": "Online shop",
        "description": "Customers place orders and pay for them.",
        "models": [
            {
                "id": "ordering",
                "title": "Ordering",
                "description": "How orders are placed and paid",
                "concepts": [
                    {
                        "id": "order",
                        "label": "Order",
                        "category": "thing",
                        "description": "A customer's request to buy goods",
                        "references": [{"file": "src/shop/orders.py", "symbol": "Order", "line": 6}],
                    },
                    {
                        "id": "payment",
                        "label": "Payment",
                        "category": "activity",
                        "description": "Settling an order",
                        "references": [{"file": "src/shop/payments.py", "symbol": "Payment"}],
                    },
                    {
                        "id": "customer",
                        "label": "Customer",
                        "category": "role",
                        "description": "Person buying goods",
                        "references": [{"file": "src/missing.py", "symbol": "Customer"}],
                    },
                ],
            }
        ],
    }


@pytest.fixture
def order_enrichment() -> dict:
    return {
        "concept": {"aliases": ["Purchase", "Order"], "notes": "Created at checkout"},
        "relationships": [
            {
                "id": "order-paid-by",
                "from": "order",
                "to": "payment",
                "phrase": "is paid by",
                "category": "uses",
            }
        ],
        "rules": [
            {
                "id": "order-has-lines",
                "title": "Order has lines",
                "text": "An order contains at least one line",
                "kind": "invariant",
                "conceptIds": ["order"],
            }
        ],
        "lifecycles": [],
    }


@pytest.fixture
def payment_enrichment() -> dict:
    return {
        "concept": {"aliases": ["Charge"]},
        "relationships": [
            {
                "id": "payment-for-customer",
                "from": "payment",
                "to": "customer",
                "phrase": "is charged to",
                "category": "other",
            }
        ],
    }


@pytest.fixture
def views_response() -> dict:
    return {
        "views": [
            {
                "id": "checkout",
                "name": "Checkout",
                "kind": "overview",
                "description": "How an order gets paid",
                "conceptIds": ["order", "payment", "customer", "ghost"],
                "relationshipIds": ["order-paid-by", "payment-for-customer"],
                "layout": {
                    "groups": [
                        {"id": "buy", "title": "Buy", "conceptIds": ["order", "customer"]},
                        {"id": "pay", "title": "Pay", "conceptIds": ["payment", "order"]},
                    ]
                },
            }
        ]
    }


@pytest.fixture
def stories_response() -> dict:
    return {
        "storyViews": [
            {
                "id": "happy-path",
                "name": "Happy path",
                "tags": ["happy_path"],
                "focusConceptId": "order",
                "steps": [
                    {
                        "id": "place",
                        "index": 3,
                        "title": "Customer places an order",
                        "narrative": "The customer checks out.",
                        "conceptIds": ["customer", "order"],
                        "relationshipIds": ["order-paid-by"],
                    },
                    {
                        "id": "pay",
                        "index": 7,
                        "title": "Order is paid",
                        "conceptIds": ["order", "payment"],
                        "relationshipIds": ["order-paid-by"],
                        "primaryConceptIds": ["payment", "ghost"],
                    },
                ],
            }
        ]
    }


@pytest.fixture
def enriched_model_dict() -> dict:
    """A small enriched model used by view, story and integrity tests."""
    return {
        "id": "ordering",
        "title": "Ordering",
        "concepts": [
            {"id": "order", "label": "Order", "category": "thing"},
            {"id": "payment", "label": "Payment", "category": "activity"},
            {"id": "customer", "label": "Customer", "category": "role"},
        ],
        "relationships": [
            {"id": "order-paid-by", "from": "order", "to": "payment", "phrase": "is paid by"},
            {"id": "payment-for-customer", "from": "payment", "to": "customer"},
        ],
    }
