from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON en camelCase (dueDate, userId...), attributs Python en snake_case"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# bornes d'une colonne INTEGER 64 bits (SQLite, BIGINT Postgres)
MIN_DB_INT = -(2 ** 63)
MAX_DB_INT = 2 ** 63 - 1
