"""System prompts and prompt builders for the VibeOS agents."""
from __future__ import annotations

import json

from vibeos.manifest import Manifest

SPECIFIER_SYSTEM_PROMPT = """You are the Specifier Agent in VibeOS.
Your role is to write tests BEFORE any code exists (TDD-first approach).

Given a manifest describing desired functionality:
1. Analyze the spec thoroughly
2. Write comprehensive unit tests using the testing frameworks in the constraints
3. Write E2E tests if visual elements are specified
4. Ensure tests WILL FAIL initially (no code exists yet)

Output ONLY the test code, no explanations.
"""

CODER_SYSTEM_PROMPT = """You are the Coder Agent in VibeOS.
Your role is to write or modify code to make failing tests pass.

Given:
- Failing test results
- Current code (if any)
- The original manifest

Write minimal, clean code that:
1. Makes the tests pass
2. Follows the tech stack constraints
3. Matches the visual and functional spec

Output ONLY the code, no explanations.
"""

AUDITOR_SYSTEM_PROMPT = """You are the Auditor Agent in VibeOS.
Your role is to evaluate the current implementation against the manifest and report the diff.

Calculate and report:
- Logic Diff: number of failing unit tests
- Visual Diff: number of failing E2E tests
- Total Diff: Logic Diff + Visual Diff

A totalDiff of 0 means the implementation is in the desired state.

Output ONLY a JSON object:
{
  "totalTests": number,
  "passedTests": number,
  "failedTests": number,
  "logicDiff": number,
  "visualDiff": number,
  "totalDiff": number,
  "recommendations": string[]
}
"""

NO_CODE_PLACEHOLDER = "// No code exists yet"


def build_specifier_prompt(manifest: Manifest, current_code: str) -> str:
    spec = manifest.spec
    lines = [
        "Generate test files for the following component:",
        "",
        f"Component: {manifest.metadata.name} (v{manifest.metadata.version})",
        f"Intent: {spec.intent}",
        "",
        f"Framework: {spec.constraints.framework}",
        f"Language: {spec.constraints.language}",
        f"Testing Frameworks: {', '.join(spec.constraints.testing)}",
        "",
        "Functional Requirements:",
    ]
    if spec.functional_spec.inputs:
        lines.append(f"Inputs: {', '.join(spec.functional_spec.inputs)}")
    lines.append(f"States: {', '.join(spec.functional_spec.states)}")
    lines.append(f"Behaviors: {', '.join(spec.functional_spec.behaviors)}")
    if spec.visual_spec:
        lines.append(f"Visual Elements: {', '.join(spec.visual_spec.elements)}")
        if spec.visual_spec.style:
            lines.append(f"Visual Style: {spec.visual_spec.style}")
    lines.extend(["", "Current Code:", current_code or NO_CODE_PLACEHOLDER, "", "Generate comprehensive tests that will FAIL."])
    return "\n".join(lines)


def build_coder_prompt(manifest: Manifest, test_results: str, current_code: str) -> str:
    return "\n".join([
        "Manifest:",
        json.dumps(manifest.to_dict(), indent=2),
        "",
        "Test Results:",
        test_results,
        "",
        "Current Code:",
        current_code or NO_CODE_PLACEHOLDER,
        "",
        "Write code to make these tests pass.",
    ])


def build_auditor_prompt(manifest: Manifest, current_code: str, loop_number: int) -> str:
    spec = manifest.spec
    lines = [
        "Analyze test results for the following component:",
        "",
        f"Component: {manifest.metadata.name}",
        f"Loop Number: {loop_number}",
        f"Intent: {spec.intent}",
        "",
        "Current Implementation:",
        "```",
        current_code,
        "```",
        "",
        "Functional Requirements:",
        f"States: {', '.join(spec.functional_spec.states)}",
        f"Behaviors: {', '.join(spec.functional_spec.behaviors)}",
    ]
    if spec.visual_spec:
        lines.append(f"Visual Elements: {', '.join(spec.visual_spec.elements)}")
    lines.extend(["", "Calculate the diff and return only the JSON object described in your instructions."])
    return "\n".join(lines)
