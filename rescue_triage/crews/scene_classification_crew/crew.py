"""
Scene Classification Crew: asks a vision-capable model to classify a disaster photo.
"""
from crewai import Agent, Task, Crew
from typing import Any, Dict
from rescue_triage.config import settings


SCENE_CLASSIFICATION_PROMPT = """
You are an emergency response AI system. Analyze the disaster image at {image_url} and provide:

1. A brief description of what you see (2-3 sentences)
2. The type of disaster: one of flood, fire, earthquake, collapse, medical, accident, landslide, other
3. The severity level: one of low, medium, high, critical
4. Which rescue team should be dispatched: one or more of NDRF, NCC, Fire, Police, Medical, Other

Respond in this exact JSON format:
{
  "description": "Brief description of the scene",
  "disasterType": "type of disaster",
  "severity": "severity level",
  "assignedTeam": "team name",
  "reasoning": "Why this team was chosen"
}
"""


class SceneClassificationCrew:
	"""
	Crew wrapping the classification oracle. Its output is raw, untrusted text;
	validation is done by ClassificationParser, not by the crew.
	"""

	def __init__(self):
		"""Initialize the scene classification crew."""
		self.analyst = Agent(
			role='Emergency Response Triage Analyst',
			goal='Classify disaster scene photographs so the right rescue teams can be dispatched.',
			backstory='You are an experienced disaster response coordinator who triages field photos for a rescue control room.',
			verbose=False,
			allow_delegation=False,
			llm=settings.default_llm
		)

		self.classify_scene_task = Task(
			description=SCENE_CLASSIFICATION_PROMPT,
			agent=self.analyst,
			expected_output="A single JSON object with description, disasterType, severity, assignedTeam and reasoning"
		)

		self.crew = Crew(
			agents=[self.analyst],
			tasks=[self.classify_scene_task],
			verbose=False
		)

	def kickoff(self, inputs: Dict[str, Any]) -> Any:
		"""
		Execute the crew with given inputs.

		Args:
			inputs: Dictionary containing input data for the crew
				- image_url: URL of the uploaded scene photograph

		Returns:
			CrewOutput from crew execution
		"""
		return self.crew.kickoff(inputs=inputs)
