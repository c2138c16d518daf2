from app.db.repo.catalog_repo import CatalogRepo
from app.db.repo.duel_results_repo import DuelResultsRepo
from app.db.repo.duels_repo import DuelsRepo
from app.db.repo.users_repo import UsersRepo

__all__ = [
    "CatalogRepo",
    "DuelResultsRepo",
    "DuelsRepo",
    "UsersRepo",
]
