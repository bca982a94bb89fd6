"""
Dialogue parser - converts dialogue scripts to graph JSON.

Supports a simple text-based script format:

```
$gold = 5

# start
Welcome, traveller.
You look lost.
-> crossroads

# crossroads
>> Go north -> north [gold gte 10]
>> Go south -> south

# pay
! gold = 0
-> crossroads

# north
? gold gte 10
-> treasure

# south
-> start
```

A node becomes a ``choice`` node if it has ``>>`` options, a ``setVar``
node if it has a ``!`` assignment, a ``condition`` node if it has a
``?`` test, a ``line`` node if it has text, and a ``jump`` otherwise.
Text followed by options yields a line node that leads into a choice
node named ``<id>_choices``. The first node is the start node.
"""

from __future__ import annotations

import re
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Optional

from dialogue_engine.dialog.types import (
    ChoiceNode,
    Comparison,
    ConditionNode,
    DialogueChoice,
    DialogueGraph,
    DialogueNode,
    JumpNode,
    LineNode,
    SetVarNode,
    VariableCondition,
)

logger = logging.getLogger(__name__)

CHOICES_SUFFIX = "_choices"


def _parse_value(raw: str) -> Any:
    """Parse a literal as JSON, falling back to the raw string."""
    raw = raw.strip()
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (bool, int, float, str))


@dataclass
class _NodeDraft:
    id: str
    text_lines: list[str] = field(default_factory=list)
    next_node: Optional[str] = None
    choices: list[DialogueChoice] = field(default_factory=list)
    assignment: Optional[tuple[str, Any]] = None
    test: Optional[VariableCondition] = None

    @property
    def text(self) -> str:
        return '\n'.join(self.text_lines).strip()


@dataclass
class ParsedDialogue:
    """A complete parsed dialogue."""
    id: str
    graph: DialogueGraph
    variables: dict[str, Any] = field(default_factory=dict)


class DialogueParser:
    """
    Parses dialogue scripts from a simple text format.
    """

    # Regex patterns
    NODE_PATTERN = re.compile(r'^#\s*(\w+)\s*$')
    CHOICE_PATTERN = re.compile(r'^>>\s*(.+?)\s*->\s*(\w+)(?:\s*\[(.+?)\])?\s*$')
    NEXT_PATTERN = re.compile(r'^->\s*(\w+)\s*$')
    ASSIGN_PATTERN = re.compile(r'^!\s*(\w+)\s*=\s*(.+)$')
    TEST_PATTERN = re.compile(r'^\?\s*(.+)$')
    VARIABLE_PATTERN = re.compile(r'^\$(\w+)\s*=\s*(.+)$')
    CONDITION_PATTERN = re.compile(r'^(\w+)\s+(eq|ne|gte|lte|gt|lt)\s+(.+)$')

    def parse_file(self, path: str | Path) -> ParsedDialogue:
        """Parse a dialogue script file."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()

        return self.parse_string(content, dialogue_id=path.stem)

    def parse_condition(self, expression: str) -> Optional[VariableCondition]:
        """Parse ``variable operator value``; None if malformed."""
        match = self.CONDITION_PATTERN.match(expression.strip())
        if not match:
            logger.warning(f"Unparseable condition: {expression!r}")
            return None
        value = _parse_value(match.group(3))
        if not _is_scalar(value):
            logger.warning(f"Condition literal must be a bool, number or string: {expression!r}")
            return None
        return VariableCondition(
            variable=match.group(1),
            operator=match.group(2),
            value=value,
        )

    def parse_string(self, content: str, dialogue_id: str = "parsed") -> ParsedDialogue:
        """Parse a dialogue script string."""
        drafts: list[_NodeDraft] = []
        variables: dict[str, Any] = {}
        current: Optional[_NodeDraft] = None

        for line in content.split('\n'):
            line = line.rstrip()

            # Blank lines are kept inside node text
            if not line.strip():
                if current and current.text_lines:
                    current.text_lines.append('')
                continue

            if line.strip().startswith('//'):
                continue

            match = self.NODE_PATTERN.match(line)
            if match:
                current = _NodeDraft(id=match.group(1))
                drafts.append(current)
                continue

            # Variable definition (before the first node)
            match = self.VARIABLE_PATTERN.match(line)
            if match and not current:
                value = _parse_value(match.group(2))
                if _is_scalar(value):
                    variables[match.group(1)] = value
                else:
                    logger.warning(f"Ignoring non-scalar variable: {line!r}")
                continue

            if not current:
                logger.warning(f"Ignoring line outside any node: {line!r}")
                continue

            match = self.CHOICE_PATTERN.match(line)
            if match:
                condition = self.parse_condition(match.group(3)) if match.group(3) else None
                current.choices.append(
                    DialogueChoice(
                        text=match.group(1),
                        target_id=match.group(2),
                        condition=condition,
                    )
                )
                continue

            match = self.NEXT_PATTERN.match(line)
            if match:
                current.next_node = match.group(1)
                continue

            match = self.ASSIGN_PATTERN.match(line)
            if match:
                value = _parse_value(match.group(2))
                if _is_scalar(value):
                    current.assignment = (match.group(1), value)
                else:
                    logger.warning(f"Ignoring non-scalar assignment: {line!r}")
                continue

            match = self.TEST_PATTERN.match(line)
            if match:
                current.test = self.parse_condition(match.group(1))
                continue

            current.text_lines.append(line)

        nodes: list[DialogueNode] = []
        for draft in drafts:
            nodes.extend(self._build_nodes(draft))

        graph = DialogueGraph(
            nodes=nodes,
            start_node_id=drafts[0].id if drafts else "start",
        )
        return ParsedDialogue(id=dialogue_id, graph=graph, variables=variables)

    def _build_nodes(self, draft: _NodeDraft) -> list[DialogueNode]:
        if draft.choices:
            if not draft.text:
                return [ChoiceNode(id=draft.id, choices=draft.choices)]
            choice_id = f"{draft.id}{CHOICES_SUFFIX}"
            return [
                LineNode(id=draft.id, content=draft.text, target_id=choice_id),
                ChoiceNode(id=choice_id, choices=draft.choices),
            ]

        if draft.assignment:
            variable, value = draft.assignment
            return [SetVarNode(id=draft.id, variable=variable, value=value, target_id=draft.next_node)]

        if draft.test:
            return [
                ConditionNode(
                    id=draft.id,
                    variable=draft.test.variable,
                    condition=Comparison(operator=draft.test.operator, value=draft.test.value),
                    target_id=draft.next_node,
                )
            ]

        if draft.text:
            return [LineNode(id=draft.id, content=draft.text, target_id=draft.next_node)]

        return [JumpNode(id=draft.id, target_id=draft.next_node)]

    def to_json(self, parsed: ParsedDialogue) -> dict:
        """Convert a parsed dialogue to graph-file JSON."""
        data = {'id': parsed.id, 'variables': parsed.variables}
        data.update(parsed.graph.to_json_dict())
        return data

    def save_json(self, parsed: ParsedDialogue, path: str | Path) -> None:
        """Save a parsed dialogue as JSON."""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_json(parsed), f, indent=2)


def compile_dialogue_file(input_path: str | Path, output_path: Optional[str | Path] = None) -> Path:
    """
    Compile a dialogue script to graph JSON.

    Args:
        input_path: Path to .dialog file
        output_path: Path to output .json file (default: same name with .json)

    Returns:
        The path written
    """
    input_path = Path(input_path)
    if output_path is None:
        output_path = input_path.with_suffix('.json')
    else:
        output_path = Path(output_path)

    parser = DialogueParser()
    parser.save_json(parser.parse_file(input_path), output_path)
    logger.info(f"Compiled {input_path} -> {output_path}")
    return output_path
