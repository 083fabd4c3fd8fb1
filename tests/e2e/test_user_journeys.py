"""
End-to-end tests for complete user journeys.
"""
from datetime import date

from database.models import Notification, Project, Task, WarehouseRequest

from tests.conftest import open_session, send_command


class TestCompleteUserJourneys:
    """Test complete user workflows from command text to stored entities."""

    def test_event_planning_journey(self, test_client, test_db_session, sample_admin):
        session_id = open_session(test_client, "user-1")

        # Step 1: create the project
        reply = send_command(test_client, session_id,
                             "crear proyecto: Boda García, cliente Ana López, para el 2026-12-01", "user-1").json()
        assert "PROJ-0001" in reply["text"]
        project = test_db_session.get(Project, "PROJ-0001")
        assert project.client == "Ana López"
        assert project.due_date == date(2026, 12, 1)

        # Step 2: a task inside it, due tomorrow (fixed clock: Monday 2026-10-19)
        reply = send_command(test_client, session_id,
                             "crear tarea: confirmar banquete para mañana en PROJ-0001", "user-1").json()
        assert "TASK-0001" in reply["text"]
        task = test_db_session.get(Task, "TASK-0001")
        assert task.due_date == date(2026, 10, 20)
        assert task.project_id == "PROJ-0001"

        # Step 3: furniture from the warehouse
        reply = send_command(test_client, session_id,
                             "solicitar al almacén para PROJ-0001: 10 sillas, 5 mesas y 2 carpas para el 2026-11-02",
                             "user-1").json()
        assert "WR-0001" in reply["text"]
        request = test_db_session.get(WarehouseRequest, "WR-0001")
        assert [item["quantity"] for item in request.items] == [10, 5, 2]

        # Step 4: status and summary
        reply = send_command(test_client, session_id, "estado de la tarea TASK-0001", "user-1").json()
        assert "To Do" in reply["text"]

        reply = send_command(test_client, session_id, "resumen del proyecto Boda", "user-1").json()
        assert "Boda García" in reply["text"]
        assert "confirmar banquete" in reply["text"]

        # Every turn is recorded in order
        history = test_client.get(f"/agent/sessions/{session_id}/history").json()["turns"]
        assert len(history) == 10
        assert [t["sender"] for t in history] == ["user", "agent"] * 5

        # One notification per created entity
        assert test_db_session.query(Notification).count() == 3

    def test_missing_data_is_explained_then_fixed(self, test_client, test_db_session, sample_admin):
        session_id = open_session(test_client, "user-1")

        reply = send_command(test_client, session_id, "crear tarea: revisar contrato", "user-1").json()
        assert "due_date" in reply["text"]
        assert test_db_session.query(Task).count() == 0

        reply = send_command(test_client, session_id, "crear tarea: revisar contrato para el viernes", "user-1").json()
        assert "TASK-0001" in reply["text"]
        assert test_db_session.get(Task, "TASK-0001").due_date == date(2026, 10, 23)

    def test_ambiguous_project_name(self, test_client, test_db_session, sample_admin, sample_project):
        test_db_session.add(Project(id="PROJ-0002", name="Boda Pérez", client="Luis Pérez"))
        test_db_session.commit()
        session_id = open_session(test_client, "user-1")

        reply = send_command(test_client, session_id, "resumen del proyecto boda", "user-1").json()

        assert "PROJ-0001" in reply["text"]
        assert "PROJ-0002" in reply["text"]

    def test_ticket_lookup_miss(self, test_client, sample_admin):
        session_id = open_session(test_client, "user-1")

        reply = send_command(test_client, session_id, "estado del ticket TKT-9999", "user-1").json()

        assert reply["text"] == "No se encontró el ticket con ID TKT-9999."

    def test_created_ticket_is_immediately_queryable(self, test_client, sample_admin):
        session_id = open_session(test_client, "user-1")

        reply = send_command(test_client, session_id, "crear ticket: la impresora no funciona, prioridad alta",
                             "user-1").json()
        assert "TKT-0001" in reply["text"]

        first = send_command(test_client, session_id, "estado del ticket TKT-0001", "user-1").json()
        second = send_command(test_client, session_id, "estado del ticket TKT-0001", "user-1").json()

        assert "Open" in first["text"]
        assert "High" in first["text"]
        assert first["text"] == second["text"]
