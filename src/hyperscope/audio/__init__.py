"""Audio-derived inputs for the simulation."""

from hyperscope.audio.amplitude import AmplitudeTrack, AnalyserParams, ConstantAmplitude, silence

__all__ = ["AmplitudeTrack", "AnalyserParams", "ConstantAmplitude", "silence"]
