"""tabgrouper classification engine.

Leaf-first:
  compiler.py     — auto-pattern templates and manual regexes → google-re2 matchers
  store.py        — PatternStore: ordered patterns, templates, enabled flag
  classifier.py   — Classifier: domain → Matched / NO_MATCH
  cache.py        — ClassificationCache: URL tier + auto-pattern domain tier
  orchestrator.py — GroupingOrchestrator: the façade hosts and commands call
"""
