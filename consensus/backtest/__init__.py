"""consensus.backtest

Replay of recorded draws through a fresh session.

io loads draw files, replay drives the session, validation scores the run.
"""
