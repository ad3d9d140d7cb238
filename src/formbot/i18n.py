from __future__ import annotations

STRINGS: dict[str, dict[str, str]] = {
    "welcome": {
        "en": "Send /form <id> to fill out a form.",
        "uk": "Надішліть /form <id>, щоб заповнити форму.",
    },
    "form_not_found": {"en": "Form not found.", "uk": "Форму не знайдено."},
    "load_failed": {"en": "Failed to load form.", "uk": "Не вдалося завантажити форму."},
    "storage_failed": {
        "en": "Something went wrong while saving your progress. Please try again.",
        "uk": "Не вдалося зберегти прогрес. Спробуйте ще раз.",
    },
    "no_active_form": {
        "en": "No form in progress. Send /form <id> to start.",
        "uk": "Немає активної форми. Надішліть /form <id>, щоб почати.",
    },
    "question_header": {"en": "Question {n} of {total}", "uk": "Питання {n} з {total}"},
    "questions_count": {"en": "Questions: {total}", "uk": "Питань: {total}"},
    "available": {"en": "Not placed yet:", "uk": "Ще не розподілено:"},
    "nothing_left": {"en": "everything is placed", "uk": "усе розподілено"},
    "blank_prompt": {
        "en": "Reply with the answer for blank {n}.",
        "uk": "Надішліть відповідь для пропуску {n}.",
    },
    "no_blanks": {"en": "This sentence has no blanks.", "uk": "У цьому реченні немає пропусків."},
    "not_selected": {"en": "not answered", "uk": "без відповіді"},
    "use_buttons": {"en": "Use the buttons to answer this question.", "uk": "Відповідайте кнопками під питанням."},
    "submitted": {
        "en": "Form submitted successfully! Thank you.",
        "uk": "Форму успішно надіслано! Дякуємо.",
    },
    "submit_failed": {
        "en": "There was an error submitting your form.",
        "uk": "Під час надсилання форми сталася помилка.",
    },
    "cancelled": {"en": "Form discarded.", "uk": "Форму скасовано."},
    "forms_header": {"en": "Saved forms:", "uk": "Збережені форми:"},
    "forms_empty": {"en": "No forms saved yet.", "uk": "Ще немає збережених форм."},
    "btn_prev": {"en": "◀️ Back", "uk": "◀️ Назад"},
    "btn_next": {"en": "▶️ Next", "uk": "▶️ Далі"},
    "btn_submit": {"en": "📨 Submit", "uk": "📨 Надіслати"},
    "btn_blank": {"en": "Blank {n}", "uk": "Пропуск {n}"},
}

def t(key: str, lang: str, **fmt: object) -> str:
    text = STRINGS.get(key, {}).get(lang, STRINGS.get(key, {}).get("en", key))
    return text.format(**fmt) if fmt else text
