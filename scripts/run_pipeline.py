#!/usr/bin/env python
"""Standalone script to run the staged concept model pipeline on a repository."""

import argparse
import sys
from pathlib import Path

# Add the project root to path for direct execution
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from conceptgen.llm.oracle import OllamaOracle
from conceptgen.pipeline import PipelineOptions, run_pipeline


def main():
    parser = argparse.ArgumentParser(
        description="Generate a concept model for a repository"
    )
    parser.add_argument(
        "repo_path",
        type=Path,
        nargs="?",
        default=Path("."),
        help="Path to the repository (default: current directory)",
    )
    parser.add_argument(
        "--out-dir",
        default="docs/domain/concepts",
        help="Output directory relative to the repository",
    )
    parser.add_argument(
        "--max-models",
        type=int,
        default=None,
        help="Only enrich the first N discovered models",
    )
    parser.add_argument(
        "--no-publish",
        action="store_true",
        help="Skip publishing to the viewer registry",
    )

    args = parser.parse_args()

    if not args.repo_path.is_dir():
        print(f"Error: Not a directory: {args.repo_path}")
        sys.exit(1)

    options = PipelineOptions(
        repo_root=args.repo_path.resolve(),
        out_dir=args.out_dir,
        publish=not args.no_publish,
        max_models=args.max_models,
    )

    print(f"Processing: {options.repo_root}")

    try:
        result = run_pipeline(OllamaOracle(), options)
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)

    models = (result.get("project") or {}).get("models", [])
    print(f"\nProject saved to: {result.get('artifact_path')}")

    print("\nSummary:")
    print(f"  Models: {len(models)}")
    print(f"  Concepts: {sum(len(m.get('concepts', [])) for m in models)}")
    print(f"  Relationships: {sum(len(m.get('relationships', [])) for m in models)}")
    print(f"  Warnings: {len(result.get('warnings', []))}")
    print(f"  Integrity issues: {len(result.get('integrity_issues', []))}")


if __name__ == "__main__":
    main()
