"""
Motor de matching entre usuarios y propiedades.

Implementa:
- Generación: puntúa todas las propiedades disponibles contra el perfil
- Persistencia: reemplaza los matches previos del usuario
- Batch: regenera los matches de todos los usuarios, tolerando fallas parciales

Ninguna operación pública lanza excepciones: las fallas se loguean y se
reportan como lista vacía, False o 0 según el caso.
"""

from typing import Optional

import structlog
from pydantic import ValidationError

from propmatch.config import Settings, get_settings
from propmatch.database import (
    MatchRepository,
    ProfileRepository,
    PropertyRepository,
)
from propmatch.exceptions import DataAccessError
from propmatch.matching.scoring import calculate_score
from propmatch.models import Match, Property, UserPreferenceProfile

logger = structlog.get_logger()


class MatchingEngine:
    """
    Motor de matching por score ponderado.

    Flujo por usuario:
    1. Obtener el perfil de preferencias
    2. Obtener todas las propiedades disponibles
    3. Calcular el score de cada propiedad
    4. Descartar las que no llegan al umbral y ordenar
    5. Reemplazar los matches guardados

    Los repositorios se inyectan; si no se pasan se crean contra el
    cliente de Supabase por defecto.
    """

    def __init__(
        self,
        profile_repo: Optional[ProfileRepository] = None,
        property_repo: Optional[PropertyRepository] = None,
        match_repo: Optional[MatchRepository] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.profile_repo = profile_repo or ProfileRepository()
        self.property_repo = property_repo or PropertyRepository()
        self.match_repo = match_repo or MatchRepository()

    async def generate_matches_for_user(self, user_id: str) -> list[Match]:
        """
        Genera los matches de un usuario sin persistirlos.

        Args:
            user_id: UUID del usuario

        Returns:
            Matches con score >= umbral, ordenados de mayor a menor.
            Lista vacía si falla alguna lectura.
        """
        try:
            profile_row = await self.profile_repo.get_by_id(user_id)
        except Exception as e:
            logger.error("Error obteniendo perfil", user_id=user_id, error=str(e))
            return []

        if not profile_row:
            logger.error("Perfil no encontrado", user_id=user_id)
            return []

        try:
            preferences = UserPreferenceProfile.from_profile_row(profile_row)
        except ValidationError as e:
            logger.error("Perfil con preferencias inválidas", user_id=user_id, error=str(e))
            return []

        try:
            property_rows = await self.property_repo.get_by_status(
                self.settings.available_status
            )
        except Exception as e:
            logger.error("Error obteniendo propiedades", user_id=user_id, error=str(e))
            return []

        logger.info(
            "Calculando matches",
            user_id=user_id,
            properties=len(property_rows),
        )

        matches = []
        seen_ids = set()
        for row in property_rows:
            try:
                prop = Property.model_validate(row)
            except ValidationError as e:
                logger.warning(
                    "Propiedad inválida, se omite",
                    property_id=row.get("id"),
                    error=str(e),
                )
                continue

            if prop.id in seen_ids:
                continue
            seen_ids.add(prop.id)

            matches.append(
                Match(
                    user_id=user_id,
                    property_id=prop.id,
                    match_score=calculate_score(preferences, prop),
                )
            )

        threshold = self.settings.match_score_threshold
        matches = [m for m in matches if m.match_score >= threshold]

        # sort es estable: los empates conservan el orden de lectura
        matches.sort(key=lambda m: m.match_score, reverse=True)

        logger.info(
            "Matches encontrados",
            user_id=user_id,
            total=len(seen_ids),
            above_threshold=len(matches),
        )

        return matches

    async def persist_matches(self, matches: list[Match]) -> bool:
        """
        Reemplaza los matches guardados del usuario por los nuevos.

        Todos los matches deben ser del mismo usuario (se toma el del
        primero). Una lista vacía no toca la base y cuenta como éxito.

        Returns:
            True si el reemplazo se aplicó completo
        """
        if not matches:
            return True

        user_id = matches[0].user_id
        rows = [m.to_db_dict() for m in matches]

        if self.settings.matches_replace_rpc:
            try:
                await self.match_repo.replace_for_user(
                    self.settings.matches_replace_rpc, user_id, rows
                )
            except Exception as e:
                logger.error("Error reemplazando matches", user_id=user_id, error=str(e))
                return False
            logger.info("Matches guardados", user_id=user_id, count=len(rows))
            return True

        try:
            previous = await self.match_repo.get_by_user(user_id)
        except Exception as e:
            logger.error("Error leyendo matches previos", user_id=user_id, error=str(e))
            return False

        try:
            await self.match_repo.delete_by_user(user_id)
        except Exception as e:
            logger.error("Error borrando matches previos", user_id=user_id, error=str(e))
            # Un delete que terminó después del timeout dejó al usuario sin matches
            if _write_applied(e):
                await self._restore_matches(user_id, previous)
            return False

        try:
            await self.match_repo.insert_many(rows)
        except Exception as e:
            logger.error("Error insertando matches", user_id=user_id, error=str(e))
            if _write_applied(e):
                logger.warning(
                    "Insert aplicado tras el timeout, se conservan los matches nuevos",
                    user_id=user_id,
                    count=len(rows),
                )
            else:
                await self._restore_matches(user_id, previous)
            return False

        logger.info("Matches guardados", user_id=user_id, count=len(rows))
        return True

    async def _restore_matches(self, user_id: str, previous: list[dict]) -> None:
        """Reinserta los matches previos tras un reemplazo fallido."""
        if not previous:
            return

        try:
            await self.match_repo.insert_many(previous)
            logger.warning(
                "Matches previos restaurados",
                user_id=user_id,
                count=len(previous),
            )
        except Exception as e:
            logger.error(
                "No se pudieron restaurar los matches previos",
                user_id=user_id,
                lost=len(previous),
                error=str(e),
            )

    async def regenerate_user_matches(self, user_id: str) -> bool:
        """Genera y guarda los matches de un usuario."""
        try:
            matches = await self.generate_matches_for_user(user_id)
            return await self.persist_matches(matches)
        except Exception as e:
            logger.exception("Error procesando usuario", user_id=user_id, error=str(e))
            return False

    async def regenerate_all_matches(self) -> int:
        """
        Regenera los matches de todos los usuarios.

        Returns:
            Cantidad de usuarios procesados con éxito (0 si no se
            pudo obtener la lista de usuarios)
        """
        stats = await self.run_matching_cycle()
        return stats["users_succeeded"]

    async def run_matching_cycle(self) -> dict:
        """
        Ejecuta un ciclo completo de matching, un usuario por vez.

        Una falla en un usuario no frena al resto.

        Returns:
            Estadísticas del procesamiento
        """
        stats = {
            "users_processed": 0,
            "users_succeeded": 0,
            "errors": 0,
        }

        logger.info("Iniciando ciclo de matching")

        try:
            user_ids = await self.profile_repo.get_all_ids()
        except Exception as e:
            logger.error("Error obteniendo usuarios", error=str(e))
            stats["errors"] += 1
            return stats

        logger.info("Usuarios a procesar", total=len(user_ids))

        for user_id in user_ids:
            stats["users_processed"] += 1
            if await self.regenerate_user_matches(user_id):
                stats["users_succeeded"] += 1
            else:
                stats["errors"] += 1

        logger.info("Ciclo de matching completado", **stats)
        return stats

    async def get_matched_properties(self, user_id: str) -> list[Property]:
        """
        Obtiene las propiedades guardadas como match de un usuario.

        Returns:
            Propiedades ordenadas por score con ``match_percentage``
            completo. Lista vacía si falla alguna lectura.
        """
        try:
            match_rows = await self.match_repo.get_by_user(user_id)
            if not match_rows:
                return []

            scores = {row["property_id"]: row["match_score"] for row in match_rows}
            property_rows = await self.property_repo.get_by_ids(list(scores))
        except Exception as e:
            logger.error("Error obteniendo matches guardados", user_id=user_id, error=str(e))
            return []

        properties = []
        for row in property_rows:
            try:
                prop = Property.model_validate(row)
            except ValidationError as e:
                logger.warning(
                    "Propiedad inválida, se omite",
                    property_id=row.get("id"),
                    error=str(e),
                )
                continue
            prop.match_percentage = scores.get(prop.id)
            properties.append(prop)

        properties.sort(key=lambda p: p.match_percentage or 0, reverse=True)
        return properties


def _write_applied(error: Exception) -> bool:
    """True si la escritura fallida igual quedó aplicada en la base."""
    return isinstance(error, DataAccessError) and error.applied is True
