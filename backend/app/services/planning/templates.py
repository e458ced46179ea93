"""Static goal templates and keyword-based template selection."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

from app.services.planning.models import GoalCategory


@dataclass(frozen=True)
class TaskBlueprint:
    title: str
    description: Optional[str] = None
    duration_minutes: int = 60
    resources: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class PhaseBlueprint:
    title: str
    description: str
    tasks: Tuple[TaskBlueprint, ...]


@dataclass(frozen=True)
class GoalTemplate:
    key: str
    phases: Tuple[PhaseBlueprint, ...]


def _task(title: str, duration: int = 60, description: str | None = None, resources: Sequence[str] | None = None) -> TaskBlueprint:
    return TaskBlueprint(
        title=title,
        description=description,
        duration_minutes=duration,
        resources=tuple(resources) if resources else None,
    )


def _phase(title: str, description: str, *tasks: TaskBlueprint) -> PhaseBlueprint:
    return PhaseBlueprint(title=title, description=description, tasks=tuple(tasks))


FITNESS_WEIGHT_LOSS = GoalTemplate(
    key="fitness_weight_loss",
    phases=(
        _phase(
            "Foundation & Assessment",
            "Establish baseline habits and assess current fitness level",
            _task("Take body measurements and photos", 30),
            _task("Plan weekly meal prep", 45),
            _task("30-minute walk or light cardio", 30),
            _task("Research healthy recipes", 30),
            _task("Set up meal tracking app", 20),
        ),
        _phase(
            "Building Momentum",
            "Increase activity level and establish consistent habits",
            _task("45-minute cardio session", 45),
            _task("Strength training workout", 45),
            _task("Meal prep for the week", 90),
            _task("30-minute active recovery (yoga/stretching)", 30),
            _task("Review and log weekly progress", 20),
        ),
        _phase(
            "Intensification",
            "Push harder and refine your approach",
            _task("High-intensity interval training (HIIT)", 40),
            _task("Full body strength workout", 60),
            _task("Active cardio session", 45),
            _task("Flexibility and mobility work", 30),
            _task("Weekly weigh-in and measurements", 15),
        ),
        _phase(
            "Maintenance & Lifestyle",
            "Transition to sustainable long-term habits",
            _task("Workout session (your choice)", 60),
            _task("Plan next week's activities", 30),
            _task("Try a new healthy recipe", 60),
            _task("Active outdoor activity", 60),
            _task("Reflect on progress and set new mini-goals", 30),
        ),
    ),
)

FITNESS_GENERAL = GoalTemplate(
    key="fitness_general",
    phases=(
        _phase(
            "Getting Started",
            "Build foundational fitness habits",
            _task("Light cardio session", 30),
            _task("Basic strength exercises", 30),
            _task("Stretching routine", 20),
            _task("Plan workout schedule", 30),
        ),
        _phase(
            "Building Strength",
            "Increase workout intensity",
            _task("Cardio workout", 45),
            _task("Strength training", 45),
            _task("Core workout", 30),
            _task("Recovery stretching", 20),
        ),
        _phase(
            "Advanced Training",
            "Push your limits",
            _task("Intense cardio session", 50),
            _task("Heavy strength training", 60),
            _task("Flexibility work", 30),
        ),
    ),
)

EDUCATION_LEARNING = GoalTemplate(
    key="education_learning",
    phases=(
        _phase(
            "Foundation",
            "Learn core concepts and fundamentals",
            _task("Study fundamental concepts", 60),
            _task("Take notes and summarize", 30),
            _task("Practice exercises", 45),
            _task("Watch tutorial/lecture", 45, resources=["Khan Academy", "Coursera"]),
            _task("Review and self-test", 30),
        ),
        _phase(
            "Deep Learning",
            "Dive deeper into complex topics",
            _task("Study advanced material", 90),
            _task("Work on practice problems", 60),
            _task("Create flashcards for review", 30, resources=["Anki"]),
            _task("Apply concepts to project", 60),
        ),
        _phase(
            "Application & Mastery",
            "Apply knowledge and solidify understanding",
            _task("Work on capstone project", 90),
            _task("Review all material", 60),
            _task("Practice teaching concepts", 45),
            _task("Take practice assessment", 60),
        ),
        _phase(
            "Review & Consolidation",
            "Lock in what you learned and plan what comes next",
            _task("Spaced-repetition review session", 30, resources=["Anki"]),
            _task("Summarize key learnings in your own words", 45),
            _task("Share your project for feedback", 45),
            _task("Plan your next learning goal", 30),
        ),
    ),
)

CAREER_JOB_SEARCH = GoalTemplate(
    key="career_job_search",
    phases=(
        _phase(
            "Preparation",
            "Update materials and research opportunities",
            _task("Update resume", 90),
            _task("Optimize LinkedIn profile", 60, resources=["linkedin.com"]),
            _task("Research target companies", 60),
            _task("Identify key skills to highlight", 45),
            _task("Prepare portfolio/work samples", 90),
        ),
        _phase(
            "Active Search",
            "Apply and network actively",
            _task("Apply to job postings", 60),
            _task("Networking outreach", 45),
            _task("Practice interview questions", 45),
            _task("Follow up on applications", 30),
            _task("Attend networking event or webinar", 90),
        ),
        _phase(
            "Interview Preparation",
            "Prepare for and ace interviews",
            _task("Research company culture", 45, resources=["glassdoor.com"]),
            _task("Practice behavioral questions", 60),
            _task("Prepare questions for interviewer", 30),
            _task("Mock interview session", 60),
            _task("Review and refine pitch", 30),
        ),
    ),
)

CAREER_GENERAL = GoalTemplate(
    key="career_general",
    phases=(
        _phase(
            "Assessment",
            "Evaluate current position and goals",
            _task("Define career objectives", 60),
            _task("Identify skill gaps", 45),
            _task("Research industry trends", 60),
        ),
        _phase(
            "Skill Building",
            "Develop necessary skills",
            _task("Take online course/training", 90),
            _task("Practice new skills", 60),
            _task("Seek feedback from mentor", 45),
        ),
        _phase(
            "Advancement",
            "Take action toward goals",
            _task("Work on visibility project", 90),
            _task("Network with leaders", 60),
            _task("Document achievements", 45),
        ),
    ),
)

FINANCE_SAVINGS = GoalTemplate(
    key="finance_savings",
    phases=(
        _phase(
            "Assessment",
            "Understand your current financial situation",
            _task("Track all expenses for a week", 30),
            _task("Review bank statements", 45),
            _task("Calculate net worth", 30),
            _task("Identify unnecessary subscriptions", 30),
        ),
        _phase(
            "Planning",
            "Create a savings strategy",
            _task("Create monthly budget", 60),
            _task("Set up automatic savings", 30),
            _task("Research high-yield savings accounts", 45),
            _task("Plan for upcoming expenses", 30),
        ),
        _phase(
            "Execution",
            "Implement and monitor your plan",
            _task("Weekly budget review", 20),
            _task("Find ways to reduce expenses", 30),
            _task("Review savings progress", 20),
            _task("Adjust budget as needed", 30),
        ),
    ),
)

HEALTH_GENERAL = GoalTemplate(
    key="health_general",
    phases=(
        _phase(
            "Awareness",
            "Understand your health baseline",
            _task("Schedule health checkup", 30),
            _task("Start health journal", 30),
            _task("Research health best practices", 45),
        ),
        _phase(
            "Habit Formation",
            "Build healthy habits",
            _task("Morning wellness routine", 30),
            _task("Healthy meal preparation", 60),
            _task("Evening wind-down routine", 30),
        ),
        _phase(
            "Optimization",
            "Fine-tune your health practices",
            _task("Review and adjust routines", 30),
            _task("Try new healthy activity", 45),
            _task("Track health metrics", 20),
        ),
    ),
)

HEALTH_MINDFULNESS = GoalTemplate(
    key="health_mindfulness",
    phases=(
        _phase(
            "Introduction",
            "Learn meditation basics",
            _task("5-minute guided meditation", 10, resources=["Headspace", "Insight Timer"]),
            _task("Deep breathing exercises", 10),
            _task("Journaling practice", 20),
            _task("Learn about mindfulness", 30),
        ),
        _phase(
            "Building Practice",
            "Establish regular meditation habit",
            _task("10-minute meditation", 15),
            _task("Mindful walking", 20),
            _task("Gratitude journaling", 15),
            _task("Body scan meditation", 20),
        ),
        _phase(
            "Deepening Practice",
            "Extend and deepen your practice",
            _task("20-minute meditation", 25),
            _task("Mindfulness in daily activities", 30),
            _task("Loving-kindness meditation", 20),
            _task("Weekly reflection", 30),
        ),
    ),
)

CREATIVITY = GoalTemplate(
    key="creativity",
    phases=(
        _phase(
            "Exploration",
            "Explore and gather inspiration",
            _task("Research and gather inspiration", 45),
            _task("Experiment with techniques", 60),
            _task("Create rough sketches/drafts", 45),
        ),
        _phase(
            "Development",
            "Develop your creative skills",
            _task("Focused creative practice", 90),
            _task("Learn new technique", 60),
            _task("Work on project", 90),
        ),
        _phase(
            "Refinement",
            "Polish and share your work",
            _task("Refine and edit work", 60),
            _task("Get feedback", 45),
            _task("Prepare for sharing/exhibition", 60),
        ),
    ),
)

RELATIONSHIPS = GoalTemplate(
    key="relationships",
    phases=(
        _phase(
            "Reflection",
            "Understand your relationship goals",
            _task("Reflect on relationship values", 30),
            _task("Identify areas for improvement", 30),
            _task("Plan quality time activities", 30),
        ),
        _phase(
            "Connection",
            "Build deeper connections",
            _task("Quality time with loved one", 60),
            _task("Practice active listening", 30),
            _task("Express appreciation", 20),
            _task("Plan meaningful activity", 45),
        ),
        _phase(
            "Growth",
            "Strengthen and grow together",
            _task("Have meaningful conversation", 45),
            _task("Try new activity together", 90),
            _task("Reflect on relationship progress", 30),
        ),
    ),
)

PERSONAL_GROWTH = GoalTemplate(
    key="personal_growth",
    phases=(
        _phase(
            "Self-Discovery",
            "Understand yourself better",
            _task("Journaling session", 30),
            _task("Identify values and priorities", 45),
            _task("Set specific objectives", 30),
        ),
        _phase(
            "Development",
            "Work on personal development",
            _task("Read personal development content", 45),
            _task("Practice new habit", 30),
            _task("Reflect on progress", 20),
        ),
        _phase(
            "Integration",
            "Integrate changes into daily life",
            _task("Review and adjust goals", 30),
            _task("Celebrate progress", 20),
            _task("Plan next steps", 30),
        ),
    ),
)

PERSONAL_READING = GoalTemplate(
    key="personal_reading",
    phases=(
        _phase(
            "Setup",
            "Establish your reading habit",
            _task("Create reading list", 30, resources=["goodreads.com"]),
            _task("Set up reading space", 20),
            _task("Schedule daily reading time", 15),
            _task("Read for 20 minutes", 25),
        ),
        _phase(
            "Building Momentum",
            "Increase reading consistency",
            _task("30-minute reading session", 35),
            _task("Take notes on key insights", 20),
            _task("Discuss book with others", 30),
        ),
        _phase(
            "Deep Reading",
            "Engage more deeply with content",
            _task("Extended reading session", 60),
            _task("Write book summary", 30),
            _task("Apply insights to life", 30),
        ),
    ),
)

# Evaluated in order; the first rule with a matching keyword wins.
KEYWORD_RULES: Tuple[Tuple[Tuple[str, ...], GoalTemplate], ...] = (
    (("weight", "lose", "fit"), FITNESS_WEIGHT_LOSS),
    (("learn", "study", "course"), EDUCATION_LEARNING),
    (("job", "career", "promotion", "interview"), CAREER_JOB_SEARCH),
    (("save", "money", "budget"), FINANCE_SAVINGS),
    (("read", "book"), PERSONAL_READING),
    (("meditat", "mindful", "stress"), HEALTH_MINDFULNESS),
)

CATEGORY_TEMPLATES: Dict[GoalCategory, GoalTemplate] = {
    GoalCategory.FITNESS: FITNESS_GENERAL,
    GoalCategory.EDUCATION: EDUCATION_LEARNING,
    GoalCategory.CAREER: CAREER_GENERAL,
    GoalCategory.HEALTH: HEALTH_GENERAL,
    GoalCategory.FINANCE: FINANCE_SAVINGS,
    GoalCategory.CREATIVITY: CREATIVITY,
    GoalCategory.RELATIONSHIPS: RELATIONSHIPS,
    GoalCategory.PERSONAL: PERSONAL_GROWTH,
}


@dataclass(frozen=True)
class TemplateCatalog:
    """Read-only registry mapping goals to templates."""

    keyword_rules: Tuple[Tuple[Tuple[str, ...], GoalTemplate], ...] = KEYWORD_RULES
    category_templates: Dict[GoalCategory, GoalTemplate] = field(default_factory=lambda: dict(CATEGORY_TEMPLATES))

    def select_template(self, category: GoalCategory, title: str) -> GoalTemplate:
        """Return the keyword-matched template, else the category default."""
        title_lower = (title or "").lower()
        for keywords, template in self.keyword_rules:
            if any(keyword in title_lower for keyword in keywords):
                return template
        return self.category_templates.get(category, PERSONAL_GROWTH)

    def templates(self) -> Tuple[GoalTemplate, ...]:
        seen: Dict[str, GoalTemplate] = {}
        for _, template in self.keyword_rules:
            seen.setdefault(template.key, template)
        for template in self.category_templates.values():
            seen.setdefault(template.key, template)
        return tuple(seen.values())


DEFAULT_CATALOG = TemplateCatalog()
