"""Seeded numpy random streams, one per consumer.

Each effect samples its base positions from its own ``numpy.random.Generator``
(``"effects.vent_smoke"``, ``"effects.h2s_gas"``, ...) and the vent mesh from
``"geometry.vent"``. All streams hang off one master seed, so:

- the same seed rebuilds the same scene,
- attaching, detaching or resizing one effect never shifts another
  effect's positions.

    from primordia.util import rng

    rng.init(config.RANDOM_SEED)
    base = sample(spec, count, rng.get("effects.ambient_dust"))
"""

from __future__ import annotations

import zlib

import numpy as np

from primordia.types import RandomSeed


class RNGProvider:
    """Lazily creates and caches a Generator per domain name."""

    def __init__(self, master_seed: RandomSeed = None) -> None:
        self._master_seed = master_seed
        self._streams: dict[str, np.random.Generator] = {}

    @property
    def master_seed(self) -> RandomSeed:
        return self._master_seed

    @property
    def domains(self) -> list[str]:
        """Names of the streams handed out since the last reset."""
        return sorted(self._streams)

    def derive_seed(self, domain: str) -> int:
        """Stable 32-bit seed for ``domain`` under the current master seed."""
        # crc32 rather than hash(): str hashes are salted per interpreter run.
        return zlib.crc32(f"{self._master_seed}:{domain}".encode())

    def get(self, domain: str) -> np.random.Generator:
        """The Generator for ``domain``.

        The same object is returned on every call until ``reset()``, so a
        domain's sequence carries on instead of starting over.
        """
        stream = self._streams.get(domain)
        if stream is None:
            if self._master_seed is None:
                stream = np.random.default_rng()
            else:
                stream = np.random.default_rng(self.derive_seed(domain))
            self._streams[domain] = stream
        return stream

    def reset(self, master_seed: RandomSeed = None) -> None:
        """Switch to ``master_seed`` and drop every cached stream.

        Generators obtained earlier keep running on the old seed; fetch new
        ones with ``get()``.
        """
        self._master_seed = master_seed
        self._streams.clear()


# =============================================================================
# Module-level API
# =============================================================================

_provider: RNGProvider | None = None


def init(master_seed: RandomSeed = None) -> None:
    """Seed the shared provider, creating it on first use.

    Args:
        master_seed: int or str for reproducible streams, None for entropy.
    """
    global _provider
    if _provider is None:
        _provider = RNGProvider(master_seed)
    else:
        _provider.reset(master_seed)


def get(domain: str) -> np.random.Generator:
    """The shared provider's Generator for ``domain``.

    Without a prior ``init()`` the provider starts unseeded.
    """
    global _provider
    if _provider is None:
        _provider = RNGProvider(None)
    return _provider.get(domain)


def reset(master_seed: RandomSeed = None) -> None:
    """Reseed the shared provider. Requires ``init()`` to have run."""
    if _provider is None:
        raise RuntimeError("RNG not initialized - call rng.init() first")
    _provider.reset(master_seed)
