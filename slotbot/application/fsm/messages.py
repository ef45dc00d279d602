# Customer-facing texts. Tenants are Spanish-speaking businesses.

WELCOME_MESSAGE = "¡Hola! Soy tu asistente de agendación. 👋"
FAQ_FALLBACK_MESSAGE = "Lo siento, aún estoy aprendiendo sobre este tema. Si quieres agendar, elige un servicio de la lista."
FLOW_ERROR_MESSAGE = "Lo siento, ocurrió un error en el flujo. ¿Podemos empezar de nuevo?"

# Intents answered outside the booking flow
SUPPORT_HANDOFF_MESSAGE = "Te pondré en contacto con un agente humano. Por favor, aguarda un momento."
PROMOTIONS_MESSAGE = "Pregunta por nuestras promociones vigentes al agendar tu cita. ¿Qué servicio te interesa?"
RESCHEDULE_MESSAGE = "Para reagendar elige el nuevo servicio y horario. Si quieres liberar tu cita anterior, envía «cancelar» con su folio."
BOOKING_ON_RECORD_MESSAGE = "Tu cita con folio {folio} está confirmada. ¡Te esperamos!"

# Services
ASK_SERVICE_MESSAGE = "¿Qué servicio deseas agendar?"
NO_SERVICE_MESSAGE = "No se encontró el servicio. Elige uno de la lista."
NO_DAYS_MESSAGE = "Por ahora no hay días disponibles para {service_name}. ¿Quieres elegir otro servicio?"
TITLE_SERVICES = "Servicios disponibles"
BUTTON_SERVICES = "Ver servicios"

# Days
ASK_DAY_MESSAGE = "¿Para qué día te gustaría agendar?"
ASK_DAY_AGAIN_MESSAGE = "Por favor selecciona la fecha deseada"
TITLE_DAYS = "Días disponibles"
BUTTON_DAYS = "Ver días"

# Turns
ASK_TURN_MESSAGE = "¿Para qué turno te gustaría agendar?"
ASK_TURN_AGAIN_MESSAGE = "Por favor selecciona el turno deseado"
TITLE_TURNS = "Turnos disponibles"
BUTTON_TURNS = "Ver turnos"

# Times
ASK_TIME_MESSAGE = "¿Para qué horario te gustaría agendar?"
ASK_TIME_AGAIN_MESSAGE = "Por favor selecciona el horario deseado"
SLOT_TAKEN_MESSAGE = "Ese horario acaba de ser reservado. Por favor elige otro horario."
TITLE_TIMES = "Horarios disponibles"
BUTTON_TIMES = "Ver horarios"

ROW_DESCRIPTION = "Haz clic para seleccionar"

# Name
ASK_NAME_MESSAGE = "Para finalizar, ¿podrías decirme tu nombre completo?"
ASK_NAME_AGAIN_MESSAGE = "Por favor ingresa un nombre válido para la cita."
TITLE_NAME = "Tu nombre"
BUTTON_NAME = "Opciones"

# Confirmation
CONFIRM_SUMMARY_MESSAGE = "Estás a punto de agendar: {service_name} el {date} a las {time} a nombre de {customer_name}. ¿Confirmas la cita?"
CONFIRM_AGAIN_MESSAGE = "Por favor confirma los detalles de tu cita para finalizar."
CONFIRM_PROBLEM_MESSAGE = "Hubo un problema al confirmar. Por favor inicia de nuevo."
COMPLETED_MESSAGE = "Cita agendada con éxito 🎉\n{service_name} el {date} a las {time}.\nTu folio es {folio}."
NO_APPOINTMENT_MESSAGE = "Agendación cancelada"
CONFIRM_BY_USER = "Sí, agendar"
CANCEL_BY_USER = "No, cancelar"

# Cancelling an existing appointment
ASK_FOLIO_MESSAGE = "Para cancelar una cita envíanos su folio (por ejemplo APP-AB12CD)."
APPOINTMENT_NOT_FOUND_MESSAGE = "No encontramos una cita activa con el folio {folio}."
APPOINTMENT_CANCELLED_MESSAGE = "Tu cita {folio} del {date} a las {time} fue cancelada."

# Navigation commands offered as list rows
BACK_TO_SERVICE = "Volver al menú de servicios"
BACK_TO_DAY = "Volver al menú de días"
BACK_TO_TIME = "Volver al menú de horarios"
CANCEL_PROCESS = "Cancelar proceso"

WEEKDAY_NAMES = ("Domingo", "Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado")
