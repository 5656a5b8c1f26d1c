class SchoolAdminError(Exception):
    """Base class for all school-admin errors."""


class DuplicateIdError(SchoolAdminError, ValueError):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} with id '{entity_id}' already exists")
        self.entity = entity
        self.entity_id = entity_id


class InvalidReferenceError(SchoolAdminError, ValueError):
    def __init__(self, field_name: str, value: str):
        super().__init__(f"{field_name} '{value}' does not reference an existing record")
        self.field_name = field_name
        self.value = value


class ReferenceInUseError(SchoolAdminError):
    def __init__(self, entity: str, entity_id: str, used_by: str):
        super().__init__(f"{entity} '{entity_id}' is still referenced by {used_by}")
        self.entity = entity
        self.entity_id = entity_id
        self.used_by = used_by


class ClassFullError(SchoolAdminError):
    def __init__(self, class_id: str, max_students: int):
        super().__init__(f"Class '{class_id}' is full ({max_students} students)")
        self.class_id = class_id
        self.max_students = max_students


class PermissionDeniedError(SchoolAdminError):
    pass


class DuplicateEmailError(SchoolAdminError, ValueError):
    def __init__(self, email: str, user_id: str):
        super().__init__(f"email '{email}' is already used by user '{user_id}'")
        self.email = email
        self.user_id = user_id
