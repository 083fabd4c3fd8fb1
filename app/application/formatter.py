"""Application layer: Spanish response texts for the command agent."""
from typing import List, Optional

from app.domain.entities import EntityKind, EntitySnapshot, ProjectSummary

CLARIFYING_MESSAGE = (
    "No entendí tu solicitud. Intenta reformularla con alguno de estos comandos:\n"
    '- "estado del ticket TKT-1234"\n'
    '- "crear tarea: revisar contrato para el 2026-11-05"\n'
    '- "crear ticket: la impresora no funciona, prioridad alta"\n'
    '- "solicitar al almacén para PROJ-0001: 10 sillas, 5 mesas"\n'
    '- "crear proyecto: Boda García, cliente Ana López"\n'
    '- "lista los proyectos"\n'
    '- "resumen del proyecto PROJ-0001"'
)

BACKEND_FAILURE_MESSAGE = "Hubo un error al procesar tu comando. Inténtalo de nuevo en unos momentos."

NO_PROJECTS_MESSAGE = "No hay proyectos registrados en el sistema."

# Spanish noun (with article) per entity kind
_NOUNS = {
    EntityKind.TASK: ("la tarea", "tareas"),
    EntityKind.TICKET: ("el ticket", "tickets"),
    EntityKind.PROJECT: ("el proyecto", "proyectos"),
    EntityKind.WAREHOUSE_REQUEST: ("la solicitud de almacén", "solicitudes de almacén"),
}

FIELD_LABELS = {
    "title": "título",
    "due_date": "fecha de vencimiento",
    "project_ref": "proyecto",
    "priority": "prioridad",
    "items": "artículos",
    "required_by": "fecha requerida",
    "name": "nombre",
    "client": "cliente",
}


def entity_status(entity: EntitySnapshot) -> str:
    if entity.kind == EntityKind.TICKET:
        return (f"El ticket '{entity.title}' ({entity.id}) tiene el estado: {entity.status} "
                f"y prioridad {entity.priority}.")
    if entity.kind == EntityKind.TASK:
        return f"La tarea '{entity.title}' ({entity.id}) tiene el estado: {entity.status}."
    if entity.kind == EntityKind.PROJECT:
        return f"El proyecto '{entity.title}' ({entity.id}) tiene el estado: {entity.status}."
    return (f"La solicitud de almacén {entity.id} para el proyecto {entity.project_id} "
            f"tiene el estado: {entity.status}.")


def not_found(kind: Optional[EntityKind], reference: str) -> str:
    noun = _NOUNS[kind][0] if kind else "el elemento"
    return f"No se encontró {noun} con ID {reference}."


def created(kind: EntityKind, label: str, entity_id: str) -> str:
    if kind == EntityKind.TASK:
        return f'Tarea "{label}" creada exitosamente con ID {entity_id}.'
    if kind == EntityKind.TICKET:
        return f'Ticket "{label}" creado exitosamente con ID {entity_id}.'
    if kind == EntityKind.PROJECT:
        return f'Proyecto "{label}" creado exitosamente con ID {entity_id}.'
    return f"Solicitud de almacén {entity_id} para el proyecto {label} creada exitosamente."


def missing_field(kind: EntityKind, field: str) -> str:
    return f'Falta el campo "{FIELD_LABELS.get(field, field)}" ({field}) para crear {_NOUNS[kind][0]}.'


def invalid_field(field: str, value: str, hint: str = "") -> str:
    message = f'El valor "{value}" no es válido para el campo "{FIELD_LABELS.get(field, field)}" ({field}).'
    return f"{message} {hint}".strip()


def permission_denied(role: str, kind: EntityKind) -> str:
    return f"Tu rol ({role}) no tiene permiso para crear {_NOUNS[kind][1]}."


def ambiguous_projects(term: str, matches: List[EntitySnapshot]) -> str:
    listing = "\n".join(f"- {p.title} ({p.id})" for p in matches)
    return f'Encontré varios proyectos que coinciden con "{term}":\n{listing}\nPor favor, sé más específico.'


def project_not_found(term: str) -> str:
    return f'No se encontró ningún proyecto que coincida con "{term}".'


def project_list(projects: List[EntitySnapshot]) -> str:
    if not projects:
        return NO_PROJECTS_MESSAGE
    return "Proyectos registrados:\n" + "\n".join(f"- {p.title} ({p.id})" for p in projects)


def _counts(counts: dict) -> str:
    return ", ".join(f"{status}: {n}" for status, n in sorted(counts.items()))


def project_summary(summary: ProjectSummary) -> str:
    project = summary.project
    due = project.due_date.isoformat() if project.due_date else "sin fecha"
    lines = [
        f"Resumen del proyecto '{project.title}' ({project.id})",
        f"Cliente: {project.client} | Estado: {project.status} | Fecha: {due}",
    ]
    total_tasks = sum(summary.task_counts.values())
    if total_tasks:
        lines.append(f"Tareas: {total_tasks} ({_counts(summary.task_counts)})")
    else:
        lines.append("Tareas: ninguna")
    total_requests = sum(summary.warehouse_counts.values())
    if total_requests:
        lines.append(f"Solicitudes de almacén: {total_requests} ({_counts(summary.warehouse_counts)})")
    else:
        lines.append("Solicitudes de almacén: ninguna")
    if summary.pending_tasks:
        lines.append("Pendientes: " + "; ".join(summary.pending_tasks))
    return "\n".join(lines)
