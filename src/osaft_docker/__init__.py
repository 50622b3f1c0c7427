"""O-Saft container tooling: Dockerfile generation, image build/save/load/pull, runner."""

__version__ = "0.1.0"
