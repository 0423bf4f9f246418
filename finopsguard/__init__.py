"""FinOpsGuard: AWS cost scan pipeline."""
