from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from brutalytics.models import Goal, ProgressEntry, Resource

RESOURCES: tuple[Resource, ...] = (
    Resource(
        id=1,
        title="Matriz de Eisenhower",
        subtitle="Diferencia lo Urgente de lo Importante",
        icon="filter",
        description=(
            "Una herramienta para priorizar tareas dividiéndolas en cuatro cuadrantes: "
            "1. Hacer (Urgente e Importante), 2. Planificar (No Urgente e Importante), "
            "3. Delegar (Urgente y No Importante), 4. Eliminar (No Urgente y No Importante)."
        ),
    ),
    Resource(
        id=2,
        title="Principio de Pareto (80/20)",
        subtitle="Enfócate en el 20% que da el 80% de resultados",
        icon="trending-up",
        description=(
            "Identifica que la mayoría de los resultados (80%) provienen de una minoría de las "
            "causas (20%). Tu misión es encontrar y explotar ese 20% vital en tu trabajo, producto, "
            "y clientes para maximizar tu impacto con el mínimo esfuerzo."
        ),
    ),
    Resource(
        id=3,
        title="Pensamiento de Primeros Principios",
        subtitle="Deconstruye problemas a sus verdades fundamentales",
        icon="box",
        description=(
            "En lugar de razonar por analogía (copiar lo que otros hacen), descompón un problema en "
            "sus elementos más básicos y verdades fundamentales. Luego, reconstrúyelo desde cero. "
            "Así se crean las verdaderas innovaciones."
        ),
    ),
    Resource(
        id=4,
        title="Círculo de Competencia",
        subtitle="Opera donde tienes una ventaja real",
        icon="target",
        description=(
            "Define honestamente y sin ego los límites de tu conocimiento. Opera solo dentro de ese "
            "círculo. La clave para evitar errores catastróficos es saber lo que no sabes y tener la "
            "disciplina de no jugar en ese terreno."
        ),
    ),
)


def resource_titles(resources: Sequence[Resource] = RESOURCES) -> list[str]:
    return [resource.title for resource in resources]


def find_resource(title: Optional[str], resources: Sequence[Resource] = RESOURCES) -> Optional[Resource]:
    """Resolve a suggested resource title, ignoring case and surrounding whitespace."""

    if not title:
        return None
    wanted = title.strip().casefold()
    for resource in resources:
        if resource.title.casefold() == wanted:
            return resource
    return None


def initial_goals(now: Optional[datetime] = None) -> list[Goal]:
    """Seed goals shown on the very first run."""

    timestamp = now or datetime.now(timezone.utc)
    return [
        Goal(
            id=1,
            title="Cerrar Ronda Serie A",
            metric="Capital Recaudado",
            current=1_200_000,
            target=5_000_000,
            unit="$",
            created_at=timestamp,
            last_updated=timestamp,
            progress_history=[ProgressEntry(date=timestamp, value=1_200_000)],
            next_reminder=timestamp + timedelta(days=7),
        ),
        Goal(
            id=2,
            title="Incrementar MRR",
            metric="Ingreso Mensual Recurrente",
            current=75_000,
            target=100_000,
            unit="$",
            created_at=timestamp,
            last_updated=timestamp,
            progress_history=[ProgressEntry(date=timestamp, value=75_000)],
            next_reminder=timestamp + timedelta(days=7),
        ),
    ]


__all__ = ["RESOURCES", "find_resource", "initial_goals", "resource_titles"]
