"""Built-in achievement catalog."""

from typing import Dict, Tuple

from goalquest.models.achievement import AchievementCondition, AchievementDefinition


def _module_goal(id: str, name: str, description: str, icon: str, tier: str, module: str, count: int, xp: int) -> AchievementDefinition:
    return AchievementDefinition(
        id=id,
        name=name,
        description=description,
        icon=icon,
        tier=tier,
        condition=AchievementCondition(kind="module_goals_completed", module=module),
        threshold=count,
        xp_reward=xp,
        module_id=module,
    )


DEFAULT_CATALOG: Tuple[AchievementDefinition, ...] = (
    # Global
    AchievementDefinition(
        id="first_goal",
        name="Getting Started",
        description="Create your first goal",
        icon="target",
        tier="bronze",
        condition=AchievementCondition(kind="count", field="total_goals"),
        threshold=1,
        xp_reward=10,
    ),
    AchievementDefinition(
        id="goal_creator",
        name="Goal Creator",
        description="Create 5 goals",
        icon="plus-circle",
        tier="bronze",
        condition=AchievementCondition(kind="count", field="total_goals"),
        threshold=5,
        xp_reward=25,
    ),
    AchievementDefinition(
        id="streak_week",
        name="Weekly Warrior",
        description="Maintain a 7-day activity streak",
        icon="fire",
        tier="silver",
        condition=AchievementCondition(kind="streak"),
        threshold=7,
        xp_reward=50,
    ),
    AchievementDefinition(
        id="streak_month",
        name="Monthly Master",
        description="Maintain a 30-day activity streak",
        icon="flame",
        tier="gold",
        condition=AchievementCondition(kind="streak"),
        threshold=30,
        xp_reward=200,
    ),
    AchievementDefinition(
        id="goal_finisher",
        name="Goal Finisher",
        description="Complete 5 goals",
        icon="check-circle",
        tier="silver",
        condition=AchievementCondition(kind="count", field="completed_goals"),
        threshold=5,
        xp_reward=75,
    ),
    AchievementDefinition(
        id="goal_master",
        name="Goal Master",
        description="Complete 25 goals",
        icon="crown",
        tier="gold",
        condition=AchievementCondition(kind="count", field="completed_goals"),
        threshold=25,
        xp_reward=200,
    ),
    AchievementDefinition(
        id="goal_legend",
        name="Goal Legend",
        description="Complete 100 goals",
        icon="trophy",
        tier="platinum",
        condition=AchievementCondition(kind="count", field="completed_goals"),
        threshold=100,
        xp_reward=500,
    ),
    AchievementDefinition(
        id="xp_collector",
        name="XP Collector",
        description="Earn 1,000 XP",
        icon="star",
        tier="silver",
        condition=AchievementCondition(kind="xp"),
        threshold=1000,
        xp_reward=100,
    ),
    # Fitness
    _module_goal("fitness_beginner", "Fitness Beginner", "Complete your first fitness goal", "activity", "bronze", "fitness", 1, 25),
    _module_goal("fitness_enthusiast", "Fitness Enthusiast", "Complete 10 fitness goals", "dumbbell", "silver", "fitness", 10, 75),
    _module_goal("fitness_champion", "Fitness Champion", "Complete 50 fitness goals", "award", "gold", "fitness", 50, 200),
    # Learning
    _module_goal("knowledge_seeker", "Knowledge Seeker", "Complete your first learning goal", "book-open", "bronze", "learning", 1, 25),
    _module_goal("lifelong_learner", "Lifelong Learner", "Complete 20 learning goals", "graduation-cap", "gold", "learning", 20, 150),
    # Home projects
    _module_goal("home_improver", "Home Improver", "Complete your first home project", "home", "bronze", "home_projects", 1, 25),
    # Bible study
    _module_goal("faithful_student", "Faithful Student", "Complete your first Bible study goal", "book", "bronze", "bible", 1, 25),
    # Work
    _module_goal("productive_worker", "Productive Worker", "Complete your first work project", "briefcase", "bronze", "work", 1, 25),
)

CATALOG_BY_ID: Dict[str, AchievementDefinition] = {d.id: d for d in DEFAULT_CATALOG}
