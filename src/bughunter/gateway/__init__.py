"""Analysis gateway client."""

from bughunter.gateway.client import AnalysisGatewayClient, AnalyzedBatch

__all__ = ["AnalysisGatewayClient", "AnalyzedBatch"]
