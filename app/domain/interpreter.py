"""Domain layer: command interpretation using Strategy pattern."""
import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from app.domain.entities import REFERENCE_PATTERN, EntityKind, kind_for_reference
from app.domain.intents import (
    CreateProject,
    CreateTask,
    CreateTicket,
    CreateWarehouseRequest,
    Intent,
    ListProjects,
    QueryEntityStatus,
    RequestedItem,
    SummarizeProject,
    Unrecognized,
    UnrecognizedReason,
)
from utils.time import fold_text

logger = logging.getLogger(__name__)

QUERY, CREATE, LIST, SUMMARY = "query", "create", "list", "summary"

# Date tokens as they look after fold_text (lower case, no accents).
_DATE_TOKEN = (
    r"(?:\d{4}-\d{1,2}-\d{1,2}"
    r"|\d{1,2}[/-]\d{1,2}(?:[/-]\d{2,4})?"
    r"|\d{1,2}\s+de\s+[a-z]+(?:\s+(?:de|del)\s+\d{4})?"
    r"|pasado\s+manana|manana|hoy"
    r"|(?:proximo\s+)?(?:lunes|martes|miercoles|jueves|viernes|sabado|domingo))"
)
_END = r"(?=$|[\s,.;!?])"


class CommandInterpreter(ABC):
    """Strategy interface for turning free text into an Intent."""

    @abstractmethod
    def interpret(self, text: str) -> Intent:
        """Interpret ``text``. Never raises; unknown input is Unrecognized."""
        pass


class _Clause:
    """A piece of the original text and its folded twin, cut in lockstep."""

    def __init__(self, raw: str, folded: str):
        self.raw = raw
        self.folded = folded

    def take(self, pattern: re.Pattern) -> Optional[str]:
        m = pattern.search(self.folded)
        if not m:
            return None
        value = self.raw[m.start("value"):m.end("value")].strip()
        self.raw = f"{self.raw[:m.start()]} {self.raw[m.end():]}"
        self.folded = f"{self.folded[:m.start()]} {self.folded[m.end():]}"
        return value

    def rest(self) -> Optional[str]:
        return _clean(self.raw)


def _clean(text: str) -> Optional[str]:
    text = re.sub(r"\s+", " ", text)
    text = text.strip(" \t,.;:!?¿¡\"'“”«»-")
    return text or None


class RegexCommandInterpreter(CommandInterpreter):
    """Concrete strategy using keyword and regex patterns (Spanish)."""

    def __init__(self):
        self.action_patterns: Dict[str, re.Pattern] = {
            QUERY: re.compile(r"\b(?:estado|estatus|status|como va|como van|como esta|consulta|consultar)\b"),
            CREATE: re.compile(
                r"\b(?:crear|crea|creame|nuev[oa]|agregar|agrega|anadir|anade|registrar|registra"
                r"|abrir|abre|solicitar|solicita|pedir|pide)\b"
            ),
            LIST: re.compile(
                r"^\W*(?:(?:por favor|puedes|podrias|me)\s+)*"
                r"(?:lista|listar|listame|listado|muestra|muestrame|mostrar|ver|cuales son|que)\b.*\bproyectos\b"
            ),
            SUMMARY: re.compile(r"\b(?:resumen|resume|resumir|resumeme)\b"),
        }
        self.warehouse_verbs = re.compile(r"\b(?:solicitar|solicita|pedir|pide)\b")
        # Only a conjunction (and an article) between two target nouns
        self.target_join = re.compile(
            r"\s*(?:,|\by\b|\be\b)\s*(?:(?:un|una|unos|unas|el|la|los|las|otro|otra|nuev[oa]s?)\s+)*"
        )
        self.create_targets: Dict[EntityKind, re.Pattern] = {
            EntityKind.TASK: re.compile(r"\btareas?\b"),
            EntityKind.TICKET: re.compile(r"\btickets?\b"),
            EntityKind.PROJECT: re.compile(r"\bproyectos?\b"),
            EntityKind.WAREHOUSE_REQUEST: re.compile(
                r"\b(?:solicitud(?:es)? de (?:almacen|materiales?)|almacen|materiales)\b"
            ),
        }
        self.query_nouns: Dict[EntityKind, re.Pattern] = {
            EntityKind.TASK: re.compile(r"\btareas?\b"),
            EntityKind.TICKET: re.compile(r"\btickets?\b"),
            EntityKind.PROJECT: re.compile(r"\bproyectos?\b"),
            EntityKind.WAREHOUSE_REQUEST: re.compile(r"\b(?:solicitud(?:es)?|almacen|pedidos?)\b"),
        }
        self.body_lead = re.compile(
            r"\s*(?:(?:llamad[oa]|titulad[oa]|que diga|con (?:el )?titulo|de nombre|sobre|para)\s*:?\s+)?"
        )
        self.project_clause = re.compile(
            r"(?:^|[\s,;])(?:(?:en|para|del|de|al)\s+(?:el\s+|la\s+)?(?:proyecto\s+)?)?(?P<value>proj-\d+)\b"
        )
        self.date_clause = re.compile(
            r"(?:^|[\s,;])(?:para|con fecha(?: de)?|fecha(?: limite)?(?: de entrega)?\s*:?|vence|vencimiento\s*:?"
            r"|entrega|antes del?|hasta el|el)\s+(?:el\s+)?(?:dia\s+)?(?P<value>" + _DATE_TOKEN + r")" + _END
        )
        self.relative_date = re.compile(r"(?:^|[\s,;])(?P<value>pasado\s+manana|manana|hoy)" + _END)
        self.priority_clause = re.compile(r"(?:^|[\s,;])(?:con\s+)?prioridad\s*:?\s*(?P<value>[a-z]+)\b")
        self.description_clause = re.compile(
            r"(?:^|[\s,.;])(?:descripcion|detalles?)\s*:\s*(?P<value>.+)$|\s+-\s+(?P<dash>.+)$"
        )
        self.client_clause = re.compile(
            r"(?:^|[\s,;])(?:para\s+el\s+|del\s+|de\s+|con\s+el\s+)?cliente\s*:?\s*(?P<value>[^,;:]+)"
        )
        self.notes_clause = re.compile(r"(?:^|[\s,.;])notas?\s*:\s*(?P<value>.+)$")
        self.item_separator = re.compile(r"\s*(?:,|;|\s+y\s+|\s+e\s+)\s*")
        self.item_pattern = re.compile(
            r"^(?P<qty>\d+)\s*(?:x\s+|unidades de\s+|piezas de\s+)?(?P<name>\S.*)$"
        )
        self.summary_target = re.compile(
            r"\bresum\w*\s+(?:(?:del|de la|de)\s+)?(?:(?:el\s+)?proyecto\s+)?(?P<value>.+)$"
        )

    def interpret(self, text: str) -> Intent:
        try:
            intent = self._interpret(text)
        except Exception as e:
            logger.error(f"Interpreter failure on {text!r}: {e}", exc_info=True)
            intent = Unrecognized(UnrecognizedReason.NO_KEYWORD)
        logger.debug(f"[INTERPRET] {text!r} -> {intent}")
        return intent

    def _interpret(self, text: str) -> Intent:
        raw = re.sub(r"\s+", " ", text or "").strip()
        if not raw:
            return Unrecognized(UnrecognizedReason.EMPTY)
        folded = fold_text(raw)
        head = folded.split(":", 1)[0]

        actions = [a for a, p in self.action_patterns.items() if p.search(head)]
        if not actions:
            return Unrecognized(UnrecognizedReason.NO_KEYWORD)
        if len(actions) > 1:
            return Unrecognized(UnrecognizedReason.CONFLICTING_KEYWORDS, detail=", ".join(actions))

        action = actions[0]
        if action == QUERY:
            return self._query(raw, folded)
        if action == LIST:
            return ListProjects()
        if action == SUMMARY:
            return self._summary(raw, folded)
        return self._create(raw, folded, head)

    def _query(self, raw: str, folded: str) -> Intent:
        references = sorted({m.group(0).upper() for m in REFERENCE_PATTERN.finditer(raw)})
        if not references:
            return Unrecognized(UnrecognizedReason.MISSING_REFERENCE)
        if len(references) > 1:
            return Unrecognized(UnrecognizedReason.CONFLICTING_KEYWORDS, detail=", ".join(references))
        reference = references[0]
        kind = kind_for_reference(reference)

        without_code = REFERENCE_PATTERN.sub(" ", folded)
        nouns = {k for k, p in self.query_nouns.items() if p.search(without_code)}
        if nouns and kind not in nouns:
            return Unrecognized(UnrecognizedReason.CONFLICTING_KEYWORDS, detail=reference)
        return QueryEntityStatus(reference=reference, kind=kind)

    def _summary(self, raw: str, folded: str) -> Intent:
        m = REFERENCE_PATTERN.search(raw)
        if m:
            if kind_for_reference(m.group(0)) != EntityKind.PROJECT:
                return Unrecognized(UnrecognizedReason.CONFLICTING_KEYWORDS, detail=m.group(0).upper())
            return SummarizeProject(project=m.group(0).upper())
        m = self.summary_target.search(folded)
        target = _clean(raw[m.start("value"):m.end("value")]) if m else None
        if not target:
            return Unrecognized(UnrecognizedReason.MISSING_REFERENCE)
        return SummarizeProject(project=target)

    def _create(self, raw: str, folded: str, head: str) -> Intent:
        found: List[Tuple[int, int, EntityKind]] = []
        for kind, pattern in self.create_targets.items():
            m = pattern.search(head)
            if m:
                found.append((m.start(), m.end(), kind))
        found.sort()
        for (_, end, first), (start, _, second) in zip(found, found[1:]):
            if self.target_join.fullmatch(head, end, start):
                return Unrecognized(UnrecognizedReason.CONFLICTING_KEYWORDS,
                                    detail=f"{first.value}, {second.value}")
        if found:
            _, target_end, kind = found[0]
        else:
            verb = self.warehouse_verbs.search(head)
            if not verb:
                return Unrecognized(UnrecognizedReason.MISSING_TARGET)
            target_end, kind = verb.end(), EntityKind.WAREHOUSE_REQUEST

        colon = folded.find(":")
        start = colon + 1 if colon != -1 else target_end
        lead = self.body_lead.match(folded, start)
        if lead:
            start = lead.end()
        body = _Clause(raw[start:], folded[start:])

        if kind == EntityKind.TASK:
            return self._create_task(raw, folded, body)
        if kind == EntityKind.TICKET:
            return self._create_ticket(body)
        if kind == EntityKind.PROJECT:
            return self._create_project(body)
        return self._create_warehouse_request(raw, folded, body)

    def _project_ref(self, raw: str, folded: str, body: _Clause) -> Optional[str]:
        ref = body.take(self.project_clause)
        if ref is None:
            m = self.project_clause.search(folded)
            if m:
                ref = raw[m.start("value"):m.end("value")]
        return ref.upper() if ref else None

    def _date(self, body: _Clause) -> Optional[str]:
        value = body.take(self.date_clause)
        if value is None:
            value = body.take(self.relative_date)
        return value

    def _create_task(self, raw: str, folded: str, body: _Clause) -> Intent:
        project_ref = self._project_ref(raw, folded, body)
        due_date = self._date(body)
        return CreateTask(title=body.rest(), due_date=due_date, project_ref=project_ref)

    def _create_ticket(self, body: _Clause) -> Intent:
        priority = body.take(self.priority_clause)
        description = None
        m = self.description_clause.search(body.folded)
        if m:
            group = "value" if m.group("value") is not None else "dash"
            description = _clean(body.raw[m.start(group):m.end(group)])
            body.raw, body.folded = body.raw[:m.start()], body.folded[:m.start()]
        return CreateTicket(title=body.rest(), description=description, priority=priority)

    def _create_project(self, body: _Clause) -> Intent:
        due_date = self._date(body)
        client = body.take(self.client_clause)
        return CreateProject(name=body.rest(), client=_clean(client) if client else None, due_date=due_date)

    def _create_warehouse_request(self, raw: str, folded: str, body: _Clause) -> Intent:
        notes = body.take(self.notes_clause)
        project_ref = self._project_ref(raw, folded, body)
        required_by = self._date(body)

        items: List[RequestedItem] = []
        rest = body.rest()
        if rest:
            for piece in self.item_separator.split(rest):
                piece = _clean(piece)
                if not piece:
                    continue
                m = self.item_pattern.match(fold_text(piece))
                if m:
                    items.append(RequestedItem(name=piece[m.start("name"):].strip(), quantity=int(m.group("qty"))))
                else:
                    items.append(RequestedItem(name=piece))
        return CreateWarehouseRequest(
            project_ref=project_ref,
            items=tuple(items),
            required_by=required_by,
            notes=_clean(notes) if notes else None,
        )


# Default interpreter instance
default_interpreter = RegexCommandInterpreter()
