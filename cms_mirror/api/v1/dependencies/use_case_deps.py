"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Depends

from cms_mirror.api.v1.dependencies.repository_deps import get_mirror_repository
from cms_mirror.application.use_cases.mirror_use_cases import MirrorUseCases
from cms_mirror.infrastructure.repositories.mirror_repository import MirrorRepository


async def get_mirror_use_cases(
    repository: MirrorRepository = Depends(get_mirror_repository)
) -> MirrorUseCases:
    """
    Dependencia para obtener los casos de uso del mirror.

    Args:
        repository: Repositorio de lectura del mirror

    Returns:
        MirrorUseCases: Instancia de casos de uso
    """
    return MirrorUseCases(repository)
