"""Application layer - Use cases, ports and the check scheduler."""
