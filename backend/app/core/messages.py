from app.core.config import get_settings

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "conflict.teacher": "The teacher already has a class in this time slot.",
        "conflict.location": "The location is already in use in this time slot.",
        "conflict.classGroup": "The class group already has a class in this time slot.",
        "substitution.double_booked": (
            "Cannot assign substitute: {teacher} is already covering class group {class_group} in this period."
        ),
        "substitution.other_group": "another group",
    },
    "th": {
        "conflict.teacher": "ครูผู้สอนมีคาบสอนซ้อนในเวลาเดียวกัน",
        "conflict.location": "สถานที่ถูกใช้งานในเวลาเดียวกัน",
        "conflict.classGroup": "กลุ่มเรียนมีคาบเรียนซ้อนในเวลาเดียวกัน",
        "substitution.double_booked": (
            "ไม่สามารถจัดสอนแทนได้ เนื่องจากครู {teacher} มีสอนแทนในคาบเดียวกันที่กลุ่มเรียน {class_group} แล้ว"
        ),
        "substitution.other_group": "อื่น",
    },
}


def message(key: str, **params: str) -> str:
    locale = get_settings().message_locale
    template = MESSAGES.get(locale, MESSAGES["en"]).get(key) or MESSAGES["en"][key]
    return template.format(**params) if params else template
