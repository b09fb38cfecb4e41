# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Domain errors shared by repositories, services and controllers."""


class StoreError(RuntimeError):
    """The backing store could not complete an operation."""


class DuplicateMemberError(ValueError):
    """A member with the same DNI already exists."""

    def __init__(self, dni: str):
        super().__init__(f"Ya existe un socio con el DNI: {dni}")
        self.dni = dni
