"""Services for the recruiter conversation assistant."""
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .language_detector import LanguageDetector, LanguageDetection
from .sender_classifier import SenderClassifier, Classification
from .conversation_store import ConversationStore
from .fit_evaluator import FitEvaluator, EnthusiasmTable
from .strategy_planner import StrategyPlanner
from .prompt_template import PromptTemplate, TemplateSlotError
from .config_loader import ConfigError, load_profile, load_prompt_config
from .output_evaluator import OutputEvaluator
from .response_composer import ResponseComposer
from .response_tracker import ResponseTracker
from .response_logger import ResponseLogger
from .conversation_pipeline import ConversationPipeline, PipelineOutcome

__all__ = ['LLMClient', 'LLMResponse', 'LLMError', 'LLMClientError', 'LanguageDetector', 'LanguageDetection', 'SenderClassifier', 'Classification', 'ConversationStore', 'FitEvaluator', 'EnthusiasmTable', 'StrategyPlanner', 'PromptTemplate', 'TemplateSlotError', 'ConfigError', 'load_profile', 'load_prompt_config', 'OutputEvaluator', 'ResponseComposer', 'ResponseTracker', 'ResponseLogger', 'ConversationPipeline', 'PipelineOutcome']
