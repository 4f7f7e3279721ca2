from .condition_extractor import ConditionExtractor
from .confidence_scorer import ConfidenceAssessment, ConfidenceScorer
from .entity_directory_cache import EntityDirectoryCache
from .entity_discovery import EntityDiscovery
from .fuzzy_matcher import FuzzyMatcher
from .intent_classifier import IntentClassifier
from .query_parser import QueryParser
from .query_processor import QueryProcessor
from .task_service import ProjectService, TaskService
from .tracker_directory_service import TrackerDirectoryService

__all__ = [
    "ConditionExtractor",
    "ConfidenceAssessment",
    "ConfidenceScorer",
    "EntityDirectoryCache",
    "EntityDiscovery",
    "FuzzyMatcher",
    "IntentClassifier",
    "QueryParser",
    "QueryProcessor",
    "ProjectService",
    "TaskService",
    "TrackerDirectoryService",
]
