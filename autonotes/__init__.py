"""
autonotes - call-note and financial-health reporting on top of a NeuralSeek agent.

Entry points
------------
>>> from autonotes.agents import generate_financial_report, process_transcript
>>> from autonotes.utils.config import AgentSettings
>>> report = await generate_financial_report(form, AgentSettings.from_env())
"""

__version__ = "1.0.0"
