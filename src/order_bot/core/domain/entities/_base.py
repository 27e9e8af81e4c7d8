from dataclasses import asdict, fields, is_dataclass
from typing import Any, TypeVar

T = TypeVar("T")

class EntityMixin:
    @classmethod
    def from_dict(cls: type[T], data: dict[str, Any]) -> T:
        """
        Cria a entidade a partir de um dict, ignorando chaves desconhecidas.
        """
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_model(cls: type[T], model: Any) -> T:
        """
        Cria a entidade a partir de um modelo Django.
        Usa os campos da dataclass (inclusive `*_id` de FKs) para ler o model.
        """
        if not is_dataclass(cls):
            raise TypeError(f"{cls.__name__} deve ser um dataclass")
        data: dict[str, Any] = {}
        for f in fields(cls):
            data[f.name] = getattr(model, f.name)
        return cls(**data)
