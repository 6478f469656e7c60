from .evaluator import JudgmentService, parse_verdict
