"""Command contract and the lookup helpers shared by every SCXML command.

A command is a function of (document text, parameters): ``execute`` parses the
text, locates its target, mutates the tree and serializes it back. All lookups
happen before the first mutation, so a failed result carries the input text
unchanged. ``undo`` builds an inverse command from the values captured by a
successful ``execute`` and runs it against the text it is given.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Protocol, Set, Tuple, runtime_checkable

from lxml import etree

from statechart_engines.scxml_commands.models import CommandErrorCode, CommandResult
from statechart_engines.scxml_document.accessor import (
    ScxmlDocument,
    ScxmlParseError,
    child_states,
    detach_element,
    ensure_viz_namespace,
    find_state_element,
    iter_state_elements,
    iter_transitions,
    parse_document,
    release_viz_namespace,
    serialize_document,
    transitions_of,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class Command(Protocol):
    def execute(self, scxml_content: str) -> CommandResult:
        ...

    def undo(self, scxml_content: str) -> CommandResult:
        ...

    def describe(self) -> str:
        ...


class CommandFailure(Exception):
    """Aborts a command before mutation; converted to a failed CommandResult."""

    def __init__(self, code: CommandErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class BaseCommand(ABC):
    """Template for parse -> locate -> mutate -> serialize commands."""

    # set on inverses of edits that introduced the xmlns:viz declaration
    release_viz: bool = False
    _declared_viz: bool = False

    def execute(self, scxml_content: str) -> CommandResult:
        self._declared_viz = False
        try:
            doc = self.parse(scxml_content)
            affected = self._apply(doc)
        except CommandFailure as exc:
            logger.debug("%s failed: %s", type(self).__name__, exc.message)
            return self.failure(exc.message, scxml_content, exc.code)
        if self.release_viz:
            release_viz_namespace(doc)
        return self.success(serialize_document(doc), affected)

    def undo(self, scxml_content: str) -> CommandResult:
        try:
            inverse = self._inverse()
        except CommandFailure as exc:
            return self.failure(exc.message, scxml_content, exc.code)
        return inverse.execute(scxml_content)

    def get_description(self) -> str:
        return self.describe()

    @abstractmethod
    def describe(self) -> str:
        ...

    @abstractmethod
    def _apply(self, doc: ScxmlDocument) -> List[str]:
        """Mutate doc in place and return the affected element ids."""

    @abstractmethod
    def _inverse(self) -> Command:
        """Command undoing the last successful execute."""

    # --- helpers ---

    def declare_viz(self, doc: ScxmlDocument) -> None:
        if ensure_viz_namespace(doc):
            self._declared_viz = True

    def releasing_viz(self, inverse: "BaseCommand") -> "BaseCommand":
        """Hand the namespace bookkeeping of this execute to its inverse."""
        inverse.release_viz = self._declared_viz
        return inverse

    @staticmethod
    def parse(scxml_content: str) -> ScxmlDocument:
        try:
            return parse_document(scxml_content)
        except ScxmlParseError as exc:
            logger.error("Unparseable SCXML document: %s", exc)
            raise CommandFailure(CommandErrorCode.PARSE_FAILURE, str(exc)) from exc

    @staticmethod
    def require_state(doc: ScxmlDocument, state_id: str, label: str = "State element") -> etree._Element:
        element = find_state_element(doc, state_id)
        if element is None:
            raise CommandFailure(CommandErrorCode.ELEMENT_NOT_FOUND, f"{label} not found: {state_id}")
        return element

    @staticmethod
    def undo_unavailable(message: str) -> CommandFailure:
        return CommandFailure(CommandErrorCode.UNDO_UNAVAILABLE, message)

    @staticmethod
    def success(new_content: str, affected_elements: Optional[List[str]] = None) -> CommandResult:
        return CommandResult(new_content=new_content, success=True, affected_elements=affected_elements)

    @staticmethod
    def failure(
        error: str,
        original_content: str,
        code: CommandErrorCode = CommandErrorCode.ELEMENT_NOT_FOUND,
    ) -> CommandResult:
        return CommandResult(new_content=original_content, success=False, error=error, error_code=code)


# --- attribute helpers ---

def set_or_remove(element: etree._Element, name: str, value: Optional[str]) -> None:
    if value is None:
        element.attrib.pop(name, None)
    else:
        element.set(name, value)


def reorder_attributes(element: etree._Element, order: Iterable[str]) -> None:
    """Re-emit attributes so names listed in order come first, in that order."""
    current = dict(element.attrib)
    ordered = [name for name in order if name in current]
    ordered += [name for name in current if name not in ordered]
    if ordered == list(current):
        return
    element.attrib.clear()
    for name in ordered:
        element.set(name, current[name])


# --- transition location ---

def _target_of(transition: etree._Element) -> str:
    return transition.get("target") or ""


def matches_loose(
    transition: etree._Element,
    target_id: str,
    event: Optional[str],
    cond: Optional[str],
) -> bool:
    """Target plus event-or-cond disambiguator; neither given means neither set."""
    if _target_of(transition) != (target_id or ""):
        return False
    transition_event = transition.get("event")
    transition_cond = transition.get("cond")
    if event and transition_event == event:
        return True
    if cond and transition_cond == cond:
        return True
    return not event and not cond and not transition_event and not transition_cond


def matches_exact(
    transition: etree._Element,
    target_id: str,
    event: Optional[str],
    cond: Optional[str],
) -> bool:
    """Target, event and cond all equal (absent counts as equal to absent)."""
    if _target_of(transition) != (target_id or ""):
        return False
    transition_event = transition.get("event")
    transition_cond = transition.get("cond")
    event_matches = transition_event == event or (not transition_event and not event)
    cond_matches = transition_cond == cond or (not transition_cond and not cond)
    return event_matches and cond_matches


def locate_transition(
    source: etree._Element,
    target_id: str,
    event: Optional[str],
    cond: Optional[str],
    index: Optional[int] = None,
    exact: bool = False,
) -> Optional[Tuple[int, etree._Element]]:
    """Find a direct transition of source.

    The ordinal index wins when it points at a transition with the expected
    target. Otherwise the first attribute match is returned; several identical
    transitions resolve to the first one.
    """
    transitions = transitions_of(source)
    if index is not None and 0 <= index < len(transitions):
        candidate = transitions[index]
        if _target_of(candidate) == (target_id or ""):
            return index, candidate
        logger.debug("Transition index %s on %s no longer targets %s", index, source.get("id"), target_id)

    matcher = matches_exact if exact else matches_loose
    for position, transition in enumerate(transitions):
        if matcher(transition, target_id, event, cond):
            return position, transition
    return None


def require_transition(
    source: etree._Element,
    source_id: str,
    target_id: str,
    event: Optional[str],
    cond: Optional[str],
    index: Optional[int] = None,
    exact: bool = False,
) -> Tuple[int, etree._Element]:
    found = locate_transition(source, target_id, event, cond, index=index, exact=exact)
    if found is None:
        raise CommandFailure(
            CommandErrorCode.ELEMENT_NOT_FOUND,
            f"Transition not found from {source_id} to {target_id}",
        )
    return found


# --- referential integrity ---

def collect_state_ids(element: etree._Element) -> Set[str]:
    """Ids of element and every state nested inside it."""
    return {node.get("id") for node in iter_state_elements(element) if node.get("id")}


def purge_references(doc: ScxmlDocument, removed_ids: Set[str]) -> int:
    """Drop transitions targeting removed ids and repair dangling initial pointers.

    A dangling ``initial`` is repointed to the owner's first remaining child
    state, or removed when none remain. Returns the number of transitions
    removed.
    """
    if not removed_ids:
        return 0
    doomed = [t for t in iter_transitions(doc.root) if t.get("target") in removed_ids]
    for transition in doomed:
        detach_element(transition)

    for owner in doc.root.iter():
        if not isinstance(owner.tag, str):
            continue
        initial = owner.get("initial")
        if initial is None or initial not in removed_ids:
            continue
        remaining = [child.get("id") for child in child_states(owner) if child.get("id")]
        if remaining:
            owner.set("initial", remaining[0])
        else:
            del owner.attrib["initial"]
    return len(doomed)
