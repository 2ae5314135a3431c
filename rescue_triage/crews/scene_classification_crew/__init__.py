from rescue_triage.crews.scene_classification_crew.crew import SceneClassificationCrew
from rescue_triage.crews.scene_classification_crew.executor import SceneClassificationExecutor

__all__ = ["SceneClassificationCrew", "SceneClassificationExecutor"]
