"""
llnd_engine - deterministic LLND scoring and classification engine.

Scores learner responses against a versioned benchmark configuration,
classifies the result, runs the writing-submission analyzer, maps
composite scores onto CEFR / ACSF bands and evaluates course benchmarks.
"""

__version__ = "1.0.0"
