"""
Unit tests for the rule-based Spanish command interpreter.
"""
import pytest

from app.domain.entities import EntityKind
from app.domain.interpreter import RegexCommandInterpreter, default_interpreter
from app.domain.intents import (
    CreateProject,
    CreateTask,
    CreateTicket,
    CreateWarehouseRequest,
    ListProjects,
    QueryEntityStatus,
    RequestedItem,
    SummarizeProject,
    Unrecognized,
    UnrecognizedReason,
)


@pytest.fixture
def interpreter():
    return RegexCommandInterpreter()


class TestStatusQueries:
    """Status questions about a single entity code."""

    def test_ticket_status(self, interpreter):
        intent = interpreter.interpret("estado del ticket TKT-1234")
        assert intent == QueryEntityStatus(reference="TKT-1234", kind=EntityKind.TICKET)

    def test_lowercase_code_is_normalized(self, interpreter):
        intent = interpreter.interpret("estado del ticket tkt-1234")
        assert intent == QueryEntityStatus(reference="TKT-1234", kind=EntityKind.TICKET)

    def test_project_status_with_accents_and_punctuation(self, interpreter):
        intent = interpreter.interpret("¿Cómo va el proyecto PROJ-0001?")
        assert intent == QueryEntityStatus(reference="PROJ-0001", kind=EntityKind.PROJECT)

    def test_warehouse_request_status(self, interpreter):
        intent = interpreter.interpret("estado de la solicitud WR-0001")
        assert intent == QueryEntityStatus(reference="WR-0001", kind=EntityKind.WAREHOUSE_REQUEST)

    def test_code_alone_decides_kind(self, interpreter):
        intent = interpreter.interpret("consulta TASK-0001")
        assert intent == QueryEntityStatus(reference="TASK-0001", kind=EntityKind.TASK)

    def test_noun_contradicting_code_is_unrecognized(self, interpreter):
        intent = interpreter.interpret("estado del ticket TASK-0001")
        assert isinstance(intent, Unrecognized)
        assert intent.reason == UnrecognizedReason.CONFLICTING_KEYWORDS

    def test_two_codes_are_unrecognized(self, interpreter):
        intent = interpreter.interpret("estado de TKT-1 y TKT-2")
        assert intent.reason == UnrecognizedReason.CONFLICTING_KEYWORDS

    def test_query_without_code(self, interpreter):
        intent = interpreter.interpret("estado del ticket")
        assert intent == Unrecognized(UnrecognizedReason.MISSING_REFERENCE)


class TestCreateTask:
    """Task creation phrasing."""

    def test_title_only(self, interpreter):
        intent = interpreter.interpret("crear tarea: revisar contrato")
        assert intent == CreateTask(title="revisar contrato", due_date=None, project_ref=None)

    def test_iso_due_date(self, interpreter):
        intent = interpreter.interpret("crear tarea: revisar contrato para el 2026-11-05")
        assert intent == CreateTask(title="revisar contrato", due_date="2026-11-05")

    def test_relative_due_date_without_colon(self, interpreter):
        intent = interpreter.interpret("crear tarea revisar contrato mañana")
        assert intent == CreateTask(title="revisar contrato", due_date="mañana")

    def test_project_and_date_are_extracted_from_title(self, interpreter):
        intent = interpreter.interpret("crear tarea: llamar al proveedor para mañana en PROJ-0001")
        assert intent == CreateTask(title="llamar al proveedor", due_date="mañana", project_ref="PROJ-0001")

    def test_spelled_out_date_keeps_original_case(self, interpreter):
        intent = interpreter.interpret("CREAR TAREA: Revisar Contrato PARA EL 5 de Noviembre")
        assert intent.title == "Revisar Contrato"
        assert intent.due_date == "5 de Noviembre"

    def test_malformed_date_is_kept_raw(self, interpreter):
        intent = interpreter.interpret("crear tarea: revisar contrato para el 31/02/2026")
        assert intent.due_date == "31/02/2026"

    def test_title_mentioning_projects(self, interpreter):
        intent = interpreter.interpret("crear tarea que revise proyectos para mañana")
        assert isinstance(intent, CreateTask)
        assert intent.due_date == "mañana"


class TestCreateTicket:
    """Ticket creation phrasing."""

    def test_priority_clause(self, interpreter):
        intent = interpreter.interpret("crear ticket: la impresora no funciona, prioridad alta")
        assert intent == CreateTicket(title="la impresora no funciona", description=None, priority="alta")

    def test_dash_description(self, interpreter):
        intent = interpreter.interpret("crear ticket: Proyector dañado - no enciende en la sala 2, prioridad urgente")
        assert intent.title == "Proyector dañado"
        assert intent.description == "no enciende en la sala 2"
        assert intent.priority == "urgente"

    def test_nuevo_ticket(self, interpreter):
        intent = interpreter.interpret("nuevo ticket: internet lento")
        assert intent == CreateTicket(title="internet lento")


class TestCreateWarehouseRequest:
    """Warehouse requests with item lists."""

    def test_full_request(self, interpreter):
        intent = interpreter.interpret(
            "solicitar al almacén para PROJ-0001: 10 sillas, 5 mesas y 2 carpas para el 2026-11-02"
        )
        assert intent == CreateWarehouseRequest(
            project_ref="PROJ-0001",
            items=(
                RequestedItem("sillas", 10),
                RequestedItem("mesas", 5),
                RequestedItem("carpas", 2),
            ),
            required_by="2026-11-02",
            notes=None,
        )

    def test_without_colon(self, interpreter):
        intent = interpreter.interpret("pide al almacén 20 manteles para PROJ-0002")
        assert intent.project_ref == "PROJ-0002"
        assert intent.items == (RequestedItem("manteles", 20),)

    def test_item_without_quantity(self, interpreter):
        intent = interpreter.interpret("solicitar materiales: sillas")
        assert intent.project_ref is None
        assert intent.items == (RequestedItem("sillas", None),)

    def test_project_noun_after_request_is_a_qualifier(self, interpreter):
        intent = interpreter.interpret("solicitud de almacén para el proyecto PROJ-0001: 10 sillas")
        assert isinstance(intent, CreateWarehouseRequest)
        assert intent.project_ref == "PROJ-0001"
        assert intent.items == (RequestedItem("sillas", 10),)


class TestCreateProject:
    def test_name_client_and_date(self, interpreter):
        intent = interpreter.interpret("crear proyecto: Boda García, cliente Ana López, para el 2026-12-01")
        assert intent == CreateProject(name="Boda García", client="Ana López", due_date="2026-12-01")

    def test_missing_client(self, interpreter):
        intent = interpreter.interpret("crear proyecto: Graduación UNAM")
        assert intent == CreateProject(name="Graduación UNAM")


class TestProjectQueries:
    @pytest.mark.parametrize("text", ["lista los proyectos", "¿Qué proyectos hay?", "muestra todos los proyectos"])
    def test_list_projects(self, interpreter, text):
        assert interpreter.interpret(text) == ListProjects()

    def test_summary_by_code(self, interpreter):
        assert interpreter.interpret("resumen del proyecto PROJ-0001") == SummarizeProject(project="PROJ-0001")

    def test_summary_by_name(self, interpreter):
        assert interpreter.interpret("resumen del proyecto Boda") == SummarizeProject(project="Boda")

    def test_summary_of_non_project_code(self, interpreter):
        intent = interpreter.interpret("resumen de TKT-1")
        assert intent.reason == UnrecognizedReason.CONFLICTING_KEYWORDS


class TestUnrecognized:
    """Anything the interpreter cannot place becomes Unrecognized, never an exception."""

    def test_gibberish(self, interpreter):
        assert interpreter.interpret("asdkjhasd") == Unrecognized(UnrecognizedReason.NO_KEYWORD)

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty(self, interpreter, text):
        assert interpreter.interpret(text) == Unrecognized(UnrecognizedReason.EMPTY)

    def test_create_without_target(self, interpreter):
        assert interpreter.interpret("crear") == Unrecognized(UnrecognizedReason.MISSING_TARGET)

    def test_conflicting_actions(self, interpreter):
        intent = interpreter.interpret("crear tarea y estado de TKT-1")
        assert intent.reason == UnrecognizedReason.CONFLICTING_KEYWORDS

    def test_only_punctuation(self, interpreter):
        assert isinstance(interpreter.interpret("::::"), Unrecognized)

    @pytest.mark.parametrize("text", [
        "crear una tarea y un ticket: revisar impresora para mañana",
        "crear ticket, tarea: revisar impresora",
    ])
    def test_two_create_targets(self, interpreter, text):
        intent = interpreter.interpret(text)
        assert intent.reason == UnrecognizedReason.CONFLICTING_KEYWORDS

    def test_default_interpreter_is_rule_based(self):
        assert isinstance(default_interpreter, RegexCommandInterpreter)
