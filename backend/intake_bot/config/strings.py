# /intake_bot/config/strings.py

# This file contains all user-facing strings, making them easy to manage
# and update without changing the dialog logic.

# --- Control tokens and keyboard labels ---
RESTART_COMMANDS = ("/start", "/restart")
RESTART_BUTTON = "🔄 Начать заново"
ACKNOWLEDGE_BUTTON = "Готово"

WATER_BUTTON = "1️⃣ Консультация по водоснабжению"
MODEL3D_BUTTON = "2️⃣ Разработка 3D модели"

# --- Welcome ---
WELCOME_MESSAGE = """👋 *Здравствуйте! Я бот компании ВиТИМ* (Водоснабжение и Технологии Информационного Моделирования)

*Чем я могу вам помочь?*

Мы специализируемся на:
• 🏗️ Проектировании систем водоснабжения и водоотведения
• 🔧 Разработке 3D моделей на языке GDL для ArchiCAD

*Выберите услугу:*
1️⃣ Консультация по водоснабжению
2️⃣ Разработка 3D модели

_В любой момент можете отправить /restart для начала заново_"""

# --- Re-prompts ---
BLANK_INPUT_WARNING = "⚠️ Пожалуйста, введите текст. Попробуйте снова:"
CONFIRMATION_REQUIRED = "Для завершения заявки нажмите кнопку 'Готово' или '🔄 Начать заново' для отмены"

# --- Water supply consultation ---
WATER_STEP_1 = """💧 *Консультация по водоснабжению*

*Шаг 1 из 6*
*Проект какой системы необходимо разработать?*
(Например: ХВС, ГВС, канализация, водосток и т.д.)"""

WATER_STEP_2 = """💧 *Консультация по водоснабжению*

*Шаг 2 из 6*
*Введите наименование объекта:*
(жилой дом / гостиница / школа / больница / другое)

_Для отмены отправьте /restart_"""

WATER_STEP_3 = """💧 *Консультация по водоснабжению*

*Шаг 3 из 6*
*Введите данные об объекте:*
• Месторасположение
• Этажность
• Строительный объем

*Пример:* Москва, ул. Ленина 10, 5 этажей, 12000 м³

_Для отмены отправьте /restart_"""

WATER_STEP_4 = """💧 *Консультация по водоснабжению*

*Шаг 4 из 6*
*Дополнительная информация:*
1. Получено ли разрешение на строительство?
2. Какой предполагаемый срок проектирования?

_Для отмены отправьте /restart_"""

WATER_STEP_5 = """💧 *Консультация по водоснабжению*

*Шаг 5 из 6*
*Введите контактные данные для связи:*
• Email (обязательно)
• Телефон
• Telegram (если отличается от текущего)

*Пример:* client@email.ru, +79161234567, @username

_Для отмены отправьте /restart_"""

# Rendered with the collected fields, {contacts} is the answer to step 5.
WATER_STEP_6 = """💧 *Консультация по водоснабжению*

*Шаг 6 из 6*
*Последний вопрос:*
Спасибо! Вся информация собрана.

✅ *Мы вышлем проект коммерческого предложения на {contacts} в течение 2-х часов.*

Для подтверждения отправки заявки нажмите "Готово".

_Для отмены отправьте /restart_"""

WATER_NOTIFICATION_TITLE = "💧 НОВАЯ ЗАЯВКА ПО ВОДОСНАБЖЕНИЮ"
WATER_SPECIALIST_NOTE = "👨‍💼 *С вами также свяжется специалист нашей компании в течение часа для уточнения деталей.*"

# --- 3D model development ---
MODEL3D_STEP_1 = """🔄 *Разработка 3D модели для ArchiCAD*

*Шаг 1 из 4*
*Введите название 3D элемента, который вам необходимо разработать:*
(Например: Специальный клапан, Декоративная решетка и т.д.)"""

MODEL3D_STEP_2 = """🔄 *Разработка 3D модели для ArchiCAD*

*Шаг 2 из 4*
*Введите требования для разработки:*
• Примерные габариты
• Примерное количество конфигураций
• Требования к пользовательскому интерфейсу

*Пример:* 300x400x500 мм, 3 конфигурации, простой интерфейс с выпадающим списком

_Для отмены отправьте /restart_"""

MODEL3D_STEP_3 = """🔄 *Разработка 3D модели для ArchiCAD*

*Шаг 3 из 4*
*Введите контактные данные для связи:*
• Email (обязательно)
• Телефон
• Telegram (если отличается от текущего)

*Пример:* designer@studio.ru, +79167654321, @designer

_Для отмены отправьте /restart_"""

MODEL3D_STEP_4 = """🔄 *Разработка 3D модели для ArchiCAD*

*Шаг 4 из 4*
*Последний вопрос:*
Спасибо! Вся информация собрана.

✅ *Мы вышлем проект коммерческого предложения на {contacts} в течение 2-х часов.*

Для подтверждения отправки заявки нажмите "Готово".

_Для отмены отправьте /restart_"""

MODEL3D_NOTIFICATION_TITLE = "🔄 НОВАЯ ЗАЯВКА НА 3D МОДЕЛЬ"
MODEL3D_SPECIALIST_NOTE = "👨‍💻 *С вами также свяжется наш 3D-специалист в течение часа для уточнения технических деталей.*"

# --- Completion ---
COMPLETION_HEADER = """✅ *Спасибо за обращение в компанию ВиТИМ!*

✅ *Ваша заявка принята!*

📧 *Мы вышлем проект коммерческого предложения на указанный email в течение 2-х часов.*"""

COMPLETION_FIELDS_HEADER = "*Собранные данные:*"
# The underscore inside {number} closes the italic entity
COMPLETION_REQUEST_NUMBER = "_Заявка №{number}"

# --- Operator notification ---
OPERATOR_TIME_LINE = "📅 *Время:* {time}"
OPERATOR_CHAT_LINE = "👤 *Chat ID:* {chat_id}"
