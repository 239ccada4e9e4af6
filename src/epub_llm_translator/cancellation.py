"""
Signaux de contrôle d'un job : annulation coopérative et pause.

Les deux objets sont partagés entre le thread qui exécute la traduction et
les threads qui la pilotent (interface, CLI). Ils reposent sur threading.Event.
"""

import threading

from .exceptions import TranslationCancelled

# Intervalle de vérification de l'annulation pendant une attente (secondes)
DEFAULT_POLL_INTERVAL = 0.1


class CancellationToken:
    """
    Jeton d'annulation propagé à chaque point d'attente du job.

    Annuler ne défait rien : le job s'arrête au prochain point de contrôle.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.raise_if_cancelled()
        Traceback (most recent call last):
        ...
        TranslationCancelled: Traduction annulée
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Attend l'annulation ; retourne True si elle a eu lieu."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise TranslationCancelled()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


class PauseGate:
    """
    Porte franchie par le job entre deux documents.

    Ouverte par défaut. `close()` met le job en pause au prochain passage,
    `open()` le reprend : la reprise est une simple transition d'état.
    """

    def __init__(self) -> None:
        self._open = threading.Event()
        self._open.set()

    def close(self) -> None:
        self._open.clear()

    def open(self) -> None:
        self._open.set()

    @property
    def is_closed(self) -> bool:
        return not self._open.is_set()

    def wait(
        self,
        token: CancellationToken | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """
        Bloque tant que la porte est fermée.

        Raises:
            TranslationCancelled: Si le jeton est annulé pendant l'attente
        """
        while not self._open.wait(poll_interval):
            if token is not None:
                token.raise_if_cancelled()
        if token is not None:
            token.raise_if_cancelled()

    def __repr__(self) -> str:
        return f"PauseGate(closed={self.is_closed})"
