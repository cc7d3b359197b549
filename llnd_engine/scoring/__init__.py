"""
scoring/ - LLND Scoring Engine

Modules:
    utils.py                  - Decimal utilities
    text_features.py          - Word, sentence and marker matching helpers
    config_resolver.py        - Benchmark config resolution + fallback snapshots
    item_scorer.py            - Objective (mcq / numeric) item scorer
    rubric_scorer.py          - Free-text rubric ladder scorer
    narrative.py              - Pre-approved justification and strategy templates
    domain_aggregator.py      - Per-domain aggregation and ACSF sub-banding
    override_evaluator.py     - Auto-support, monitor-cap and risk rules
    classifier.py             - Overall weighted classification
    writing_structure.py      - Writing layer 1: structural compliance
    writing_metrics.py        - Writing layer 2: rule metrics and rule scores
    rubric_model.py           - Writing layer 3: external rubric prompts + parser
    reconciliation.py         - Writing layer 4: rule / external reconciliation
    writing_confidence.py     - Writing layer 5: confidence
    writing_analyzer.py       - Writing pipeline orchestration
    band_mapper.py            - Placement CEFR / IELTS / ACSF band mapping
    traffic_light.py          - Course benchmark traffic-light evaluator
    pre_enrolment.py          - Pre-enrolment review (suitability + self-assessment)
    integration_service.py    - Full pipeline integration + report assembly
"""
