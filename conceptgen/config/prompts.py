"""LLM prompt templates for pipeline stages."""

# Common instruction to ensure JSON-only output
# Note: curly braces must be escaped as {{ }} for LangChain templates
JSON_ONLY_INSTRUCTION = """
CRITICAL: You MUST respond with ONLY a valid JSON object.
- Do NOT include any thinking, reasoning, or explanation.
- Do NOT use markdown code blocks.
- Start your response directly with the opening brace
- No text before or after the JSON."""

# =============================================================================
# Structure Discovery
# =============================================================================

STRUCTURE_DISCOVERY_SYSTEM_PROMPT = (
    "You are an expert software architect analyzing codebases to identify "
    "high-level domain structure." + JSON_ONLY_INSTRUCTION
)

STRUCTURE_DISCOVERY_USER_PROMPT = """You are an expert in Dubberly-style concept modeling and domain-driven design.

We are analyzing a codebase at `{repo_root}`.

Here is a list of top-level exported symbols discovered in the source files:

{symbols_text}

Your job is NOT to describe the code structure. Your job is to infer the **real-world conceptual structure** of the system and express it as a **Concept Project** with one or more **Concept Models**, at a high-level "helicopter view".

- Concepts are **things, activities, roles, states, events, places, or times** in the *domain*, not in the framework.
- Models are **coherent stories** or subsystems (e.g. "Sales", "Authentication", "Slack Bot Request Flow"), not folders or modules.
- Treat the code as **evidence**: exported symbols hint at concepts, file paths hint at subsystems.

DO:
- Merge many small code elements into a single conceptual thing where appropriate.
- Use human-friendly concept names, even if the code uses technical names.
- Prefer few, strong concepts over many weak or technical ones.

DO NOT:
- Create a concept for every exported function or class.
- Treat technical helpers (loggers, http clients, config loaders) as concepts.
- Mirror the folder structure mechanically.

Return a JSON object matching this structure:
{{
  "id": "project-id",
  "name": "Project Name (domain-level, not repo name)",
  "summary": "Short summary of what this system does in the real world",
  "description": "2-5 sentences, still at domain level",
  "models": [
    {{
      "id": "model-id",
      "title": "Model Title",
      "description": "Description of this model in human terms",
      "concepts": [
        {{
          "id": "concept-id",
          "label": "Data request",
          "category": "thing|activity|role|state|event|place|time|other",
          "description": "Brief domain-level description",
          "references": [
            {{ "file": "path/to/file.py", "symbol": "DataRequestService", "line": 12 }}
          ]
        }}
      ],
      "relationships": [],
      "rules": [],
      "lifecycles": [],
      "views": []
    }}
  ]
}}

Every concept MUST have at least one entry in "references" pointing at a file from the list above."""

# =============================================================================
# Concept Enrichment
# =============================================================================

CONCEPT_ENRICHMENT_SYSTEM_PROMPT = (
    "You are an expert software architect creating detailed domain concept "
    "definitions." + JSON_ONLY_INSTRUCTION
)

CONCEPT_ENRICHMENT_USER_PROMPT = """We are analyzing the concept "{concept_label}" (id: {concept_id}) in the model "{model_title}" of project "{project_name}".

Description: {concept_description}

Other concepts already known in this model:
{sibling_concepts}

Relationships already identified in this model:
{known_relationships}

Prefer linking to the concept IDs above and reusing their vocabulary instead of inventing new concepts.

Based on the following code snippets, provide a detailed definition of this concept, including:
1. Aliases (synonyms used in code or comments).
2. Relationships to other concepts.
3. Rules/Constraints.
4. Lifecycles (if the concept has states).

The concept is a **domain-level idea**. Use the code only as evidence.

Code Snippets:
{snippets}

Return a JSON object with this structure:
{{
  "concept": {{
    "aliases": ["string"],
    "notes": "string"
  }},
  "relationships": [
    {{
      "id": "rel-id",
      "from": "{concept_id}",
      "to": "target-concept-id",
      "phrase": "verb phrase (e.g. has, places, contains)",
      "category": "is_a|part_of|causes|enables|prevents|precedes|uses|represents|other",
      "description": "string"
    }}
  ],
  "rules": [
    {{
      "id": "rule-id",
      "title": "Rule Title",
      "text": "Rule description",
      "kind": "invariant|constraint|policy|assumption",
      "conceptIds": ["{concept_id}"]
    }}
  ],
  "lifecycles": [
    {{
      "id": "lifecycle-id",
      "subjectConceptId": "{concept_id}",
      "stateConceptIds": ["state-concept-id-1", "state-concept-id-2"],
      "transitionRelationshipIds": [],
      "initialStateId": "state-concept-id-1",
      "terminalStateIds": ["state-concept-id-2"]
    }}
  ]
}}

Only return relationships/rules/lifecycles that are strongly supported by the code."""

# =============================================================================
# View Synthesis
# =============================================================================

VIEW_DESIGN_SYSTEM_PROMPT = (
    "You are an expert at designing Dubberly-style diagrams and views." + JSON_ONLY_INSTRUCTION
)

VIEW_DESIGN_USER_PROMPT = """We have an enriched Dubberly-style concept model in project "{project_name}".

Model: "{model_title}"
Description: {model_description}

Concepts:
{concepts_json}

Relationships:
{relationships_json}

Design a small set of **views** (3-7) that help a human understand this model. Each view answers a single question or tells a single story.

Constraints:
1. Each view MUST have between 4 and 8 concepts and between 4 and 10 relationships. Split larger stories across views.
2. Include only the primary, story-critical relationships in each view.
3. One narrative per view. Do not mix high-level lifecycle with low-level plumbing.
4. Create 2-5 groups per view acting as swimlanes. Each concept belongs to exactly one group. Groups follow a left-to-right or top-to-bottom reading order.
5. Prefer relationships that flow forward across groups.
6. You MUST NOT invent concept IDs or relationship IDs. Use only IDs from the lists above.

View kinds: "overview", "lifecycle", "structure", "implementation", "datastore", "other".

Return JSON shaped like:
{{
  "views": [
    {{
      "id": "view-id",
      "name": "View name",
      "kind": "lifecycle",
      "description": "What this view explains",
      "conceptIds": ["..."],
      "relationshipIds": ["..."],
      "layout": {{
        "groups": [
          {{ "id": "group-id", "title": "Group title", "x": 60, "y": 80, "width": 260, "height": 260, "conceptIds": ["..."] }}
        ]
      }}
    }}
  ]
}}"""

# =============================================================================
# Story Synthesis
# =============================================================================

STORY_DESIGN_SYSTEM_PROMPT = (
    "You are an expert at explaining systems as step-by-step visual stories." + JSON_ONLY_INSTRUCTION
)

STORY_DESIGN_USER_PROMPT = """We have an enriched Dubberly-style concept model in project "{project_name}".

Model: "{model_title}"
Description: {model_description}

Concepts:
{concepts_json}

Relationships:
{relationships_json}

Design 2-5 **stories** that explain this model as a scenario unfolding over time (e.g. "Happy path request", "Failed payment is retried").

Constraints:
1. Each story has 3-7 steps, in chronological order, with "index" starting at 0 and increasing by one.
2. Each step shows a small subgraph: 2-6 concept IDs and 1-5 relationship IDs.
3. Each step may emphasise a subset of its own concepts/relationships as primary.
4. Use only IDs from the lists above. Do NOT invent IDs.
5. Narratives are 1-3 sentences in plain domain language.

Return JSON shaped like:
{{
  "storyViews": [
    {{
      "id": "story-id",
      "name": "Story name",
      "description": "What scenario this story explains",
      "tags": ["happy_path"],
      "focusConceptId": "concept-id",
      "steps": [
        {{
          "id": "step-id",
          "index": 0,
          "title": "Short step title",
          "narrative": "What happens in this step",
          "conceptIds": ["..."],
          "relationshipIds": ["..."],
          "primaryConceptIds": ["..."],
          "primaryRelationshipIds": ["..."]
        }}
      ]
    }}
  ]
}}"""

# =============================================================================
# Rationalization
# =============================================================================

RATIONALIZATION_SYSTEM_PROMPT = (
    "You are an expert in domain-driven design consolidating bounded contexts." + JSON_ONLY_INSTRUCTION
)

RATIONALIZATION_USER_PROMPT = """The following domain concepts were classified independently and their bounded-context labels are fragmented:

{concepts_json}

Propose between 3 and 7 consolidated bounded contexts that together cover these concepts. Every concept name listed above should appear in exactly one context. Use the concept names exactly as given.

Return JSON shaped like:
{{
  "boundedContexts": [
    {{
      "name": "Context name",
      "description": "What this context is responsible for",
      "concepts": ["Concept name", "Another concept name"]
    }}
  ]
}}"""

# =============================================================================
# Concept Sheet Pipeline
# =============================================================================

PROJECT_OVERVIEW_SYSTEM_PROMPT = (
    "You are an expert software architect writing C4-style system overviews." + JSON_ONLY_INSTRUCTION
)

PROJECT_OVERVIEW_USER_PROMPT = """We are analyzing a codebase at `{repo_root}`.

Files:
{files_text}

Exported symbols:
{symbols_text}

Describe the system at a high level. Return JSON shaped like:
{{
  "summary": "What the project does",
  "systemContext": {{
    "externalSystems": [{{ "name": "string", "description": "string", "direction": "inbound|outbound|bidirectional" }}],
    "userRoles": [{{ "name": "string", "description": "string" }}],
    "keyDependencies": ["string"]
  }},
  "containers": {{
    "services": ["string"],
    "userInterfaces": ["string"],
    "dataStores": ["string"],
    "backgroundJobs": ["string"],
    "deploymentTargets": ["string"]
  }},
  "modules": {{
    "boundaries": ["string"],
    "responsibilities": ["string"],
    "domainFocus": "string"
  }}
}}"""

CONCEPT_DISCOVERY_SYSTEM_PROMPT = (
    "You are an expert in domain-driven design identifying domain concepts in "
    "codebases." + JSON_ONLY_INSTRUCTION
)

CONCEPT_DISCOVERY_USER_PROMPT = """We are analyzing a codebase at `{repo_root}`.

Exported symbols:
{symbols_text}

Concepts already found (do NOT repeat these):
{known_concepts}

Identify additional domain concepts (entities, value objects, aggregates, services, events) that are NOT in the list above. Return an empty list if there are none left.

Return JSON shaped like:
{{
  "concepts": [
    {{
      "name": "Concept name",
      "type": "entity|value_object|aggregate_root|domain_service|application_service|event|other",
      "description": "Domain-level description",
      "references": [{{ "file": "path/to/file.py", "line": 10, "symbol": "SymbolName" }}]
    }}
  ]
}}"""

CONCEPT_SHEET_SYSTEM_PROMPT = (
    "You are an expert in domain-driven design writing concept sheets." + JSON_ONLY_INSTRUCTION
)

CONCEPT_SHEET_USER_PROMPT = """Write a concept sheet for the domain concept "{concept_name}" ({concept_type}).

Description: {concept_description}

Code Snippets:
{snippets}

Return JSON shaped like:
{{
  "metadata": {{
    "name": "{concept_name}",
    "type": "{concept_type}",
    "boundedContext": "string",
    "aggregateRoot": false,
    "criticality": "core|supporting|experimental"
  }},
  "definition": {{ "shortDescription": "string", "ubiquitousLanguage": "string" }},
  "structure": {{
    "fields": [{{ "name": "string", "type": "string", "description": "string" }}],
    "relationships": [{{ "description": "string" }}]
  }},
  "lifecycle": {{ "states": ["string"], "validTransitions": ["A -> B"] }},
  "invariants": [{{ "rule": "string", "notes": "string" }}],
  "commands": [{{ "name": "string", "description": "string" }}],
  "events": [{{ "name": "string", "description": "string" }}],
  "implementation": [{{ "kind": "file|symbol|url", "label": "string", "path": "string" }}]
}}"""
