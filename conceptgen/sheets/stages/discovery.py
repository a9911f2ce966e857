"""Convergence discovery: repeat until the oracle has nothing new to add.

Each iteration sends the names found so far and asks for concepts not in
that list. Candidates are deduplicated by exact name. The loop stops when
an iteration adds nothing new, or after ``max_iterations`` calls.
"""

from dataclasses import dataclass, field

import structlog

from conceptgen.llm.chains import run_concept_discovery_chain
from conceptgen.llm.oracle import GenerationOracle
from conceptgen.models import ConceptCandidate

logger = structlog.get_logger(__name__)

STOP_CONVERGED = "converged"
STOP_MAX_ITERATIONS = "max_iterations"


@dataclass
class DiscoveryIteration:
    iteration: int
    returned: int
    new_names: list[str]


@dataclass
class DiscoveryTrace:
    """Inspectable record of the convergence loop."""

    max_iterations: int
    iterations: list[DiscoveryIteration] = field(default_factory=list)
    stop_reason: str = STOP_MAX_ITERATIONS

    @property
    def calls_made(self) -> int:
        return len(self.iterations)


def merge_candidates(
    found: list[ConceptCandidate],
    batch: list[ConceptCandidate],
) -> tuple[list[ConceptCandidate], list[str]]:
    """Append candidates whose exact name is not already present.

    Returns:
        Tuple of (merged list, names that were new).
    """
    names = {c.name for c in found}
    merged = list(found)
    new_names = []
    for candidate in batch:
        if candidate.name in names:
            continue
        names.add(candidate.name)
        merged.append(candidate)
        new_names.append(candidate.name)
    return merged, new_names


def discover_concepts(
    oracle: GenerationOracle,
    repo_root: str,
    symbols_text: str,
    max_iterations: int,
) -> tuple[list[ConceptCandidate], DiscoveryTrace]:
    """Run the convergence loop.

    Args:
        oracle: Generation oracle.
        repo_root: Repository root shown to the oracle.
        symbols_text: Pre-formatted exported symbol listing.
        max_iterations: Hard ceiling on oracle calls.

    Returns:
        Tuple of (candidates in discovery order, trace).

    Raises:
        OracleError: Propagated from any iteration.
    """
    trace = DiscoveryTrace(max_iterations=max_iterations)
    found: list[ConceptCandidate] = []

    for iteration in range(1, max_iterations + 1):
        batch = run_concept_discovery_chain(
            oracle,
            repo_root=repo_root,
            symbols_text=symbols_text,
            known_names=[c.name for c in found],
        )
        found, new_names = merge_candidates(found, batch)
        trace.iterations.append(DiscoveryIteration(iteration, len(batch), new_names))

        logger.info(
            "discovery_iteration_complete",
            iteration=iteration,
            returned=len(batch),
            new=len(new_names),
            total=len(found),
        )

        if not new_names:
            trace.stop_reason = STOP_CONVERGED
            break

    logger.info(
        "concept_discovery_complete",
        concepts=len(found),
        iterations=trace.calls_made,
        stop_reason=trace.stop_reason,
    )
    return found, trace
