from __future__ import annotations

from typing import Final

# Placeholders: {title}, {progress} (one decimal), {days}, {target}, {unit}.

ACHIEVEMENT_TITLE: Final = "🎉 ¡META COMPLETADA: {title}!"
ACHIEVEMENT_MESSAGE: Final = (
    '¡BRUTAL! Has alcanzado el 100% de tu meta "{title}". Eres una máquina de resultados. '
    "¿Cuál será tu próximo desafío? ¡No te detengas ahora!"
)

URGENT_TITLE: Final = "🚨 ATENCIÓN URGENTE: {title}"
URGENT_MESSAGE: Final = (
    '¡ALERTA! Tu meta "{title}" necesita atención inmediata. {reason} '
    "¿Qué está bloqueando tu avance? Necesito que actúes HOY."
)
URGENT_REASON_STUCK: Final = "No has reportado progreso en 7 días."
URGENT_REASON_LOW_PROGRESS: Final = "Progreso muy bajo con deadline próximo."

NEAR_COMPLETION_VARIANTS: Final = (
    (
        "📈 ¡Casi lo logras: {title}",
        "¡Excelente progreso! Estás al {progress}% de tu meta. El último esfuerzo es el más importante. "
        "¿Qué necesitas para cruzar la meta? ¡No aflojes ahora!",
    ),
    (
        "🏁 Recta final: {title}",
        "Vas al {progress}%. Aquí es donde la mayoría se relaja y fracasa. ¿Qué vas a cerrar hoy para terminar?",
    ),
    (
        "🔥 Último empujón: {title}",
        "Estás al {progress}% de tu meta. Termina lo que empezaste. ¿Cuál es el último obstáculo real?",
    ),
)

DEADLINE_TITLE: Final = "⚠️ ¡Urgente: {title}"
DEADLINE_MESSAGE: Final = (
    "¡Atención! Solo quedan {days} días para tu deadline. Estás al {progress}% de tu meta. "
    "¿Necesitas ayuda para acelerar el progreso?"
)

GETTING_STARTED_VARIANTS: Final = (
    (
        "🚀 ¡Empieza fuerte: {title}",
        "Veo que estás comenzando con {title}. ¿Qué obstáculos has identificado? "
        "¿Cómo puedo ayudarte a avanzar más rápido? ¡No te quedes en la zona de confort!",
    ),
    (
        "🧱 Primer ladrillo: {title}",
        "Llevas el {progress}% de {title}. Empezar es lo más difícil. ¿Cuál es la acción más pequeña que puedes hacer hoy?",
    ),
    (
        "⏱️ Sin excusas: {title}",
        "{title} apenas va al {progress}%. Cada día sin avanzar es una decisión. ¿Qué vas a hacer en la próxima hora?",
    ),
)

ROUTINE_VARIANTS: Final = (
    (
        "📊 Actualización: {title}",
        "¿Cómo va el progreso con {title}? Estás al {progress}% de tu meta. ¿Qué necesitas para mantener el momentum?",
    ),
    (
        "📋 Revisión: {title}",
        "Vas al {progress}% en {title}. ¿Qué hiciste esta semana que realmente movió la aguja?",
    ),
    (
        "🎯 Enfoque: {title}",
        "{title} está al {progress}%. ¿Sigues trabajando en lo que más impacto tiene o te distrajiste?",
    ),
)

NEW_GOAL_TITLE: Final = "🎯 ¡Nueva meta establecida: {title}!"
NEW_GOAL_MESSAGE: Final = (
    'Has creado exitosamente tu meta "{title}" con objetivo de {target} {unit}. '
    "La meta está ahora en seguimiento activo. ¡Es hora de empezar a trabajar!"
)

REMINDER_URGENT_VARIANTS: Final = (
    "🚨 URGENTE: {title} necesita atención inmediata. ¿Qué estás haciendo HOY para avanzar?",
    "⚠️ ALERTA: {title} está en riesgo. ¿Cuál es tu plan de acción para los próximos 3 días?",
    "🔥 CRÍTICO: {title} requiere acción inmediata. ¿Qué obstáculo vas a eliminar hoy?",
)

REMINDER_CHALLENGE_VARIANTS: Final = (
    "💪 ¿Estás desafiándote lo suficiente con {title}? A veces necesitamos salir de nuestra zona de confort.",
    "🎯 ¿Qué obstáculo te está impidiendo avanzar más rápido en {title}?",
    "⚡ ¿Has considerado todas las opciones para acelerar {title}?",
)

REMINDER_CELEBRATION_VARIANTS: Final = (
    "🎉 ¡Excelente trabajo en {title}! ¿Qué te gustaría celebrar hoy?",
    "🏆 Has hecho un progreso significativo en {title}. ¿Qué te hace sentir más orgulloso?",
    "⭐ ¡Bien hecho! {title} está avanzando. ¿Qué estrategia te está funcionando mejor?",
)

REMINDER_ENCOURAGEMENT_VARIANTS: Final = (
    "💪 ¿Cómo va el progreso con {title}? Recuerda que cada pequeño paso cuenta.",
    "🚀 ¡Hoy es un buen día para avanzar en {title}! ¿Qué puedes hacer diferente?",
    "📈 Veo que has progresado en {title}. ¿Qué te está funcionando mejor?",
)

GOALS_ACTION_URL: Final = "/metas"


__all__ = [
    "ACHIEVEMENT_MESSAGE",
    "ACHIEVEMENT_TITLE",
    "DEADLINE_MESSAGE",
    "DEADLINE_TITLE",
    "GETTING_STARTED_VARIANTS",
    "GOALS_ACTION_URL",
    "NEAR_COMPLETION_VARIANTS",
    "NEW_GOAL_MESSAGE",
    "NEW_GOAL_TITLE",
    "REMINDER_CELEBRATION_VARIANTS",
    "REMINDER_CHALLENGE_VARIANTS",
    "REMINDER_ENCOURAGEMENT_VARIANTS",
    "REMINDER_URGENT_VARIANTS",
    "ROUTINE_VARIANTS",
    "URGENT_MESSAGE",
    "URGENT_REASON_LOW_PROGRESS",
    "URGENT_REASON_STUCK",
    "URGENT_TITLE",
]
