"""Infrastructure layer: Claude-backed command interpreter.

Claude picks exactly one tool per command; the tool call is mapped onto the
same Intent types the rule-based interpreter produces. Any failure falls
back to the rule-based interpreter so ``interpret`` stays total.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import anthropic

from app.domain.entities import EntityKind, kind_for_reference
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
from app.domain.interpreter import CommandInterpreter, RegexCommandInterpreter

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """Eres el agente de comandos del sistema de gestión de eventos "Sego".
Analiza el comando del usuario (en español) y llama EXACTAMENTE UNA herramienta.

REGLAS:
1. Siempre llama una herramienta; nunca respondas con texto.
2. Copia los títulos, nombres y descripciones tal como los escribió el usuario.
3. Copia las expresiones de fecha tal como aparecen ("mañana", "el viernes", "2026-11-05"); no las conviertas.
4. Los códigos de entidad tienen la forma TKT-1234, TASK-0001, PROJ-0001 o WR-0001.
5. Si falta información o la intención no es clara, llama request_more_info."""


def define_tools() -> List[Dict[str, Any]]:
    """Tool schemas offered to Claude, one per intent."""
    return [
        {
            "name": "query_entity_status",
            "description": "Consulta el estado de un ticket, tarea, proyecto o solicitud de almacén por su código.",
            "input_schema": {
                "type": "object",
                "properties": {
                    "reference": {"type": "string", "description": "Código de la entidad, p. ej. TKT-1234"}
                },
                "required": ["reference"],
            },
        },
        {
            "name": "create_task",
            "description": "Crea una nueva tarea, opcionalmente dentro de un proyecto.",
            "input_schema": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "due_date": {"type": "string", "description": "Expresión de fecha tal como la escribió el usuario"},
                    "project_ref": {"type": "string", "description": "Código PROJ-NNNN"},
                },
                "required": ["title"],
            },
        },
        {
            "name": "create_ticket",
            "description": "Crea un nuevo ticket de soporte.",
            "input_schema": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "priority": {"type": "string", "enum": ["baja", "media", "alta", "urgente"]},
                },
                "required": ["title"],
            },
        },
        {
            "name": "create_warehouse_request",
            "description": "Crea una solicitud de almacén para un proyecto.",
            "input_schema": {
                "type": "object",
                "properties": {
                    "project_ref": {"type": "string", "description": "Código PROJ-NNNN"},
                    "items": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "name": {"type": "string"},
                                "quantity": {"type": "integer"},
                            },
                            "required": ["name", "quantity"],
                        },
                    },
                    "required_by": {"type": "string"},
                    "notes": {"type": "string"},
                },
                "required": ["project_ref", "items"],
            },
        },
        {
            "name": "create_project",
            "description": "Crea un nuevo proyecto (evento) para un cliente.",
            "input_schema": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "client": {"type": "string"},
                    "due_date": {"type": "string"},
                },
                "required": ["name", "client"],
            },
        },
        {
            "name": "list_projects",
            "description": "Lista todos los proyectos registrados.",
            "input_schema": {"type": "object", "properties": {}},
        },
        {
            "name": "summarize_project",
            "description": "Resume el estado de un proyecto, sus tareas y solicitudes de almacén.",
            "input_schema": {
                "type": "object",
                "properties": {
                    "project": {"type": "string", "description": "Código PROJ-NNNN o nombre del proyecto"}
                },
                "required": ["project"],
            },
        },
        {
            "name": "request_more_info",
            "description": "Úsala cuando el comando no es claro o le faltan datos.",
            "input_schema": {
                "type": "object",
                "properties": {"message": {"type": "string"}},
            },
        },
    ]


def _text(args: Dict[str, Any], key: str) -> Optional[str]:
    value = args.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _items(raw: Any) -> tuple:
    items = []
    for entry in raw or []:
        quantity = entry.get("quantity")
        try:
            quantity = int(quantity) if quantity is not None else None
        except (TypeError, ValueError):
            quantity = None
        items.append(RequestedItem(name=str(entry.get("name", "")).strip(), quantity=quantity))
    return tuple(items)


def tool_call_to_intent(name: str, args: Dict[str, Any]) -> Intent:
    """Map one Claude tool call onto an Intent."""
    if name == "query_entity_status":
        reference = (_text(args, "reference") or "").upper()
        kind = kind_for_reference(reference)
        if kind is None:
            return Unrecognized(UnrecognizedReason.MISSING_REFERENCE, detail=reference or None)
        return QueryEntityStatus(reference=reference, kind=kind)
    if name == "create_task":
        return CreateTask(title=_text(args, "title"), due_date=_text(args, "due_date"),
                          project_ref=_text(args, "project_ref"))
    if name == "create_ticket":
        return CreateTicket(title=_text(args, "title"), description=_text(args, "description"),
                            priority=_text(args, "priority"))
    if name == "create_warehouse_request":
        return CreateWarehouseRequest(project_ref=_text(args, "project_ref"), items=_items(args.get("items")),
                                      required_by=_text(args, "required_by"), notes=_text(args, "notes"))
    if name == "create_project":
        return CreateProject(name=_text(args, "name"), client=_text(args, "client"),
                             due_date=_text(args, "due_date"))
    if name == "list_projects":
        return ListProjects()
    if name == "summarize_project":
        project = _text(args, "project")
        if not project:
            return Unrecognized(UnrecognizedReason.MISSING_REFERENCE)
        if kind_for_reference(project) == EntityKind.PROJECT:
            project = project.upper()
        return SummarizeProject(project=project)
    if name == "request_more_info":
        return Unrecognized(UnrecognizedReason.NEEDS_MORE_INFO, detail=_text(args, "message"))
    return Unrecognized(UnrecognizedReason.NO_KEYWORD, detail=name)


class ClaudeCommandInterpreter(CommandInterpreter):
    """Interpreter backed by the Anthropic Messages API with tool use."""

    def __init__(self, client: anthropic.Anthropic, model: str,
                 fallback: Optional[CommandInterpreter] = None, max_tokens: int = 1024):
        self.client = client
        self.model = model
        self.fallback = fallback or RegexCommandInterpreter()
        self.max_tokens = max_tokens
        self.tools = define_tools()
        self.llm_call_count = 0

    def interpret(self, text: str) -> Intent:
        if not (text or "").strip():
            return Unrecognized(UnrecognizedReason.EMPTY)
        try:
            self.llm_call_count += 1
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=0.0,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": f"Comando del usuario: {json.dumps(text, ensure_ascii=False)}"}],
                tools=self.tools,
                tool_choice={"type": "any"},
            )
            tool_calls = [block for block in response.content if block.type == "tool_use"]
            if not tool_calls:
                logger.warning("Claude didn't call any tools - using rule-based interpreter")
                return self.fallback.interpret(text)
            call = tool_calls[0]
            logger.info(f"🤖 Claude selected tool: {call.name}")
            return tool_call_to_intent(call.name, dict(call.input or {}))
        except Exception as e:
            logger.error(f"❌ LLM interpretation failed: {e}")
            return self.fallback.interpret(text)


def build_claude_interpreter(api_key: str, model: str) -> ClaudeCommandInterpreter:
    return ClaudeCommandInterpreter(anthropic.Anthropic(api_key=api_key), model)
