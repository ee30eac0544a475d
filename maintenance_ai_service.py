"""
Maintenance AI Service - Google Gemini collaborator

Text generation for everything the rule engine cannot explain by itself:
- analyze_machine: structured root-cause + action plan (JSON)
- deep_diagnostic: extended-thinking diagnosis on operator request
- generate_fleet_report: executive fleet maintenance report
- ask_machine_chat / ask_fleet_assistant: contextual Q&A

Every call is recovered locally. A missing key, a network error or an
unparseable response produces a deterministic fallback, so callers (the
alert engine in particular) never see an exception from here.

Uses the google.genai package.
"""

import logging
from typing import List, Optional

from fleet_models import MaintenanceRecommendation
from fleet_state import MachineSnapshot
from settings import GEMINI, GeminiSettings

logger = logging.getLogger(__name__)

FALLBACK_STEPS = ["Perform physical check", "Review sensor logs", "Notify supervisor"]
FALLBACK_REPORT = "Failed to generate report."
FALLBACK_CHAT = "I am unable to process that request at the moment."
FALLBACK_ASSISTANT = "I don't have enough data to answer that right now."
NO_DIAGNOSTIC = "No diagnostic results."
DIAGNOSTIC_ERROR_PREFIX = "Deep diagnostic error: "

MACHINE_CHAT_INSTRUCTION = (
    "You are an expert industrial maintenance AI assistant. Provide concise, "
    "accurate, and safety-conscious answers."
)
FLEET_ASSISTANT_INSTRUCTION = (
    "You are a Fleet Intelligence Assistant for a manufacturing plant. Use the "
    "provided fleet data to answer questions about which machines need attention, "
    "economic impact, and general health. Be concise, professional, and insightful."
)


class EmptyResponseError(ValueError):
    """Gemini answered without any text"""


def fallback_recommendation(failure_probability: int) -> MaintenanceRecommendation:
    """Deterministic advice used whenever the AI call is unavailable"""
    return MaintenanceRecommendation(
        summary="AI analysis unavailable. Manual inspection recommended.",
        root_cause="Data threshold exceedance detected.",
        urgency="immediate" if failure_probability > 80 else "medium",
        steps=list(FALLBACK_STEPS),
        parts_needed=["None identified"],
    )


def _fleet_summary(snapshots: List[MachineSnapshot]) -> str:
    return "\n".join(
        f"- {s.name} ({s.machine_class.value}): Status {s.risk_tier.value}, "
        f"Risk {s.failure_probability}%, "
        f"RUL {s.assessment.remaining_useful_life_hours}h, "
        f"Location {s.location}, "
        f"Potential Savings {s.cost.potential_savings}"
        for s in snapshots
    )


class MaintenanceAIService:
    """Adapter for Google Gemini API."""

    def __init__(self, config: Optional[GeminiSettings] = None, client=None):
        self.config = config or GEMINI
        self._client = client
        self._initialized = client is not None

    def _get_client(self):
        """Lazy initialization of the Gemini client (None when unavailable)"""
        if self._initialized:
            return self._client

        self._initialized = True
        if not self.config.configured:
            logger.warning("⚠️ GOOGLE_API_KEY not set. AI analysis uses fallbacks.")
            return None

        try:
            from google import genai

            self._client = genai.Client(api_key=self.config.api_key)
            logger.info("✅ Gemini client initialized successfully")
        except Exception as e:
            logger.error(f"❌ Failed to initialize Gemini client: {e}")
            self._client = None
        return self._client

    def _generate(self, model: str, contents: str, **config_kwargs) -> str:
        """Single generate_content call; raises on missing client or empty text"""
        client = self._get_client()
        if client is None:
            raise RuntimeError("Gemini client not available")

        from google.genai import types

        config = types.GenerateContentConfig(**config_kwargs) if config_kwargs else None
        response = client.models.generate_content(
            model=model, contents=contents, config=config
        )
        if not response.text:
            raise EmptyResponseError("Empty response from Gemini")
        return response.text

    # ───────────────────────────────────────────────────────────────────────────
    # STRUCTURED ANALYSIS
    # ───────────────────────────────────────────────────────────────────────────

    def analyze_machine(self, snapshot: MachineSnapshot) -> MaintenanceRecommendation:
        """
        Root-cause analysis and action plan for one machine.

        Args:
            snapshot: Machine state the analysis is about

        Returns:
            Parsed recommendation, or the fallback on any failure
        """
        sample = snapshot.sample
        prompt = f"""Analyze this industrial machine data and provide maintenance recommendations.
Machine: {snapshot.name} ({snapshot.machine_class.value})
Failure Risk: {snapshot.failure_probability}%
Contributing Factors: {', '.join(snapshot.assessment.contributing_factors) or 'None'}
Recent Sensors:
- Temperature: {sample.temperature:.1f}°C
- Vibration: {sample.vibration:.2f} mm/s
- Pressure: {sample.pressure:.1f} PSI
- RPM: {sample.rpm:.0f}

Provide a JSON response with: summary, root_cause, urgency (low/medium/high/immediate), steps (array), parts_needed (array)."""

        try:
            text = self._generate(
                self.config.model,
                prompt,
                response_mime_type="application/json",
                response_schema=MaintenanceRecommendation,
            )
            return MaintenanceRecommendation.model_validate_json(text)
        except Exception as e:
            logger.error(f"❌ AI analysis failed for {snapshot.machine_id}: {e}")
            return fallback_recommendation(snapshot.failure_probability)

    def deep_diagnostic(self, snapshot: MachineSnapshot) -> str:
        """
        Long-form diagnostic reasoning on why a machine is at risk.

        Runs on the diagnostic model with an extended thinking budget, so it
        is only called on operator request, never from the tick.

        Returns:
            Diagnostic text, or a one-line error message on failure
        """
        sample = snapshot.sample
        prompt = (
            f"Perform a deep diagnostic thinking analysis on why machine "
            f"{snapshot.name} ({snapshot.machine_class.value}) is showing a "
            f"{snapshot.failure_probability}% failure probability. Consider physics "
            f"of the machine, environmental factors, and historical sensor drift.\n\n"
            f"Recent Stats: Temp {sample.temperature:.1f}C, "
            f"Vibration {sample.vibration:.2f}mm/s."
        )

        try:
            from google.genai import types

            return self._generate(
                self.config.diagnostic_model,
                prompt,
                thinking_config=types.ThinkingConfig(
                    thinking_budget=self.config.diagnostic_thinking_budget
                ),
            )
        except EmptyResponseError:
            return NO_DIAGNOSTIC
        except Exception as e:
            logger.error(f"❌ Deep diagnostic failed for {snapshot.machine_id}: {e}")
            return f"{DIAGNOSTIC_ERROR_PREFIX}{e}"

    # ───────────────────────────────────────────────────────────────────────────
    # FREE TEXT
    # ───────────────────────────────────────────────────────────────────────────

    def generate_fleet_report(self, snapshots: List[MachineSnapshot]) -> str:
        """Executive maintenance report for the whole fleet"""
        prompt = f"""Generate a comprehensive industrial fleet maintenance report based on this data:
{_fleet_summary(snapshots)}

Include a high-level executive summary, identification of top critical risks, and a recommended schedule for the upcoming week. Use professional engineering terminology."""

        try:
            return self._generate(self.config.report_model, prompt)
        except Exception as e:
            logger.error(f"❌ Fleet report generation failed: {e}")
            return FALLBACK_REPORT

    def ask_machine_chat(self, query: str, snapshot: MachineSnapshot) -> str:
        """Answer an operator question about one machine"""
        sample = snapshot.sample
        context = (
            f"Context: Machine {snapshot.name} ({snapshot.machine_class.value}). "
            f"Prob: {snapshot.failure_probability}%. "
            f"Temp: {sample.temperature:.1f}°C. "
            f"Vibration: {sample.vibration:.2f}mm/s. "
            f"RUL: {snapshot.assessment.remaining_useful_life_hours}h."
        )
        try:
            return self._generate(
                self.config.model,
                f"{context}\nUser Question: {query}\nAssistant Answer:",
                system_instruction=MACHINE_CHAT_INSTRUCTION,
            )
        except Exception as e:
            logger.error(f"❌ Machine chat failed for {snapshot.machine_id}: {e}")
            return FALLBACK_CHAT

    def ask_fleet_assistant(self, query: str, snapshots: List[MachineSnapshot]) -> str:
        """Answer a question about the fleet as a whole"""
        try:
            return self._generate(
                self.config.model,
                f"Fleet Status Data:\n{_fleet_summary(snapshots)}\n\n"
                f"User Question: {query}\nAssistant Answer:",
                system_instruction=FLEET_ASSISTANT_INSTRUCTION,
            )
        except Exception as e:
            logger.error(f"❌ Fleet assistant failed: {e}")
            return FALLBACK_ASSISTANT
