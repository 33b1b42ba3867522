"""
Pattern Unit of Work.

Le Unit of Work (UoW) porte la frontière transactionnelle :
chaque méthode de service crée un UoW et ouvre un bloc `with uow:`,
et seul un appel explicite à commit() rend les écritures définitives.
Un UoW n'est jamais partagé entre deux requêtes.

    with uow:
        # ... opérations sur les repositories ...
        uow.commit()

Les lectures ouvrent un bloc en lecture seule :

    with uow.lecture_seule():
        ...
"""

from __future__ import annotations

import abc

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from boutique import config
from boutique.adapters import repository
from boutique.domain import model

DEFAULT_ENGINE = create_engine(
    config.get_database_uri(),
    isolation_level="SERIALIZABLE",
)
DEFAULT_SESSION_FACTORY = sessionmaker(bind=DEFAULT_ENGINE)


class TransactionEnLectureSeule(Exception):
    """Levée quand on tente de valider une transaction ouverte en lecture seule."""
    pass


class AbstractUnitOfWork(abc.ABC):
    """
    Interface abstraite du Unit of Work.

    Fournit un repository par entité et gère commit/rollback.
    Le rollback est automatique si commit() n'est pas appelé
    (grâce au __exit__ du context manager).
    """

    commandes: repository.AbstractRepository[model.Commande]
    produits: repository.AbstractProduitRepository
    avis: repository.AbstractRepository[model.Avis]
    cartes_bancaires: repository.AbstractRepository[model.CarteBancaire]
    lignes_commande: repository.AbstractRepository[model.LigneCommande]

    _lecture_seule: bool = False

    def __enter__(self) -> AbstractUnitOfWork:
        return self

    def __exit__(self, *args: object) -> None:
        self.rollback()
        self._lecture_seule = False

    def lecture_seule(self) -> AbstractUnitOfWork:
        """Marque la prochaine transaction comme lecture seule ; à utiliser avec `with`."""
        self._lecture_seule = True
        return self

    def commit(self) -> None:
        if self._lecture_seule:
            raise TransactionEnLectureSeule("commit() appelé dans une transaction en lecture seule")
        self._commit()

    @abc.abstractmethod
    def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    Implémentation concrète du UoW avec SQLAlchemy.

    Crée une session à l'entrée du context manager,
    la ferme à la sortie. Rollback automatique si pas de commit.
    """

    def __init__(self, session_factory: sessionmaker = DEFAULT_SESSION_FACTORY):
        self.session_factory = session_factory

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session: Session = self.session_factory()
        self.commandes = repository.SqlAlchemyRepository(self.session, model.Commande)
        self.produits = repository.SqlAlchemyProduitRepository(self.session)
        self.avis = repository.SqlAlchemyRepository(self.session, model.Avis)
        self.cartes_bancaires = repository.SqlAlchemyRepository(
            self.session, model.CarteBancaire
        )
        self.lignes_commande = repository.SqlAlchemyRepository(
            self.session, model.LigneCommande
        )
        return super().__enter__()

    def __exit__(self, *args: object) -> None:
        super().__exit__(*args)
        self.session.close()

    def _commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
