from murmur.baking.baker import RESOLUTIONS, BakedParticles, ParticleBaker
from murmur.baking.sampler import SurfaceSampler, SurfaceSamples, sample_surface

__all__ = [
    "RESOLUTIONS",
    "BakedParticles",
    "ParticleBaker",
    "SurfaceSampler",
    "SurfaceSamples",
    "sample_surface",
]
