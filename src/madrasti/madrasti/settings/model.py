from __future__ import annotations

from dataclasses import dataclass, fields, replace


@dataclass(frozen=True)
class SchoolSettings:
    """Letterhead and footer used by the printable plan and absence report."""

    ministry_name: str = "المملكة العربية السعودية"
    authority_name: str = "وزارة التعليم"
    directorate_name: str = "الإدارة العامة للتعليم ..."
    school_name: str = "اسم المدرسة"
    logo_url: str = ""
    footer_notes_left: str = "ملاحظات"
    footer_notes_left_image: str = ""
    footer_notes_right: str = "( رسالة عامة )"

    _KEYS = {
        "ministry_name": "ministryName",
        "authority_name": "authorityName",
        "directorate_name": "directorateName",
        "school_name": "schoolName",
        "logo_url": "logoUrl",
        "footer_notes_left": "footerNotesLeft",
        "footer_notes_left_image": "footerNotesLeftImage",
        "footer_notes_right": "footerNotesRight",
    }

    def to_dict(self) -> dict:
        return {self._KEYS[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, d: dict) -> "SchoolSettings":
        base = cls()
        values = {}
        for f in fields(cls):
            raw = d.get(cls._KEYS[f.name])
            values[f.name] = str(raw) if raw is not None else getattr(base, f.name)
        return cls(**values)

    @classmethod
    def field_for(cls, wire_key: str) -> str | None:
        for attr, key in cls._KEYS.items():
            if key == wire_key:
                return attr
        return None


def default_settings(school_name: str = "") -> SchoolSettings:
    if school_name:
        return replace(SchoolSettings(), school_name=school_name)
    return SchoolSettings()
