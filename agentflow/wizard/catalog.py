"""
Built-in wizard definitions.

Step catalogs for the two guided flows of the dashboard: business
onboarding and agent creation.
"""

from functools import lru_cache

from agentflow.config import WizardFlow
from agentflow.wizard.steps import StepDefinition, StepRegistry

BUSINESS_ONBOARDING_STEPS = (
    StepDefinition(
        id=1,
        title="Business Information",
        description="Tell us about your business and what you do",
        required_fields=frozenset({"companyName", "industry", "businessSize"}),
        fields=("companyName", "industry", "businessSize", "website", "description"),
    ),
    StepDefinition(
        id=2,
        title="Contact Details",
        description="How can customers reach you?",
        required_fields=frozenset({"primaryPhone", "supportEmail"}),
        fields=("primaryPhone", "supportEmail", "businessAddress", "operatingHours"),
    ),
    StepDefinition(
        id=3,
        title="Target Audience",
        description="Who are your ideal customers?",
        required_fields=frozenset({"targetMarket"}),
        fields=("targetMarket", "customerDemographics", "marketingGoals", "currentChannels"),
    ),
    StepDefinition(
        id=4,
        title="Platform Selection",
        description="Choose your messaging platforms",
        required_fields=frozenset({"platforms"}),
        fields=("platforms", "primaryPlatform", "platformGoals", "expectedVolume"),
    ),
    StepDefinition(
        id=5,
        title="AI Configuration",
        description="Customize your AI assistant behavior",
        required_fields=frozenset({"aiPersonality"}),
        fields=("aiPersonality", "businessTone", "keyMessages", "specialInstructions"),
    ),
)

# Platform credentials are optional at creation time; they can be set later.
AGENT_WIZARD_STEPS = (
    StepDefinition(
        id=1,
        title="Basic Information",
        required_fields=frozenset({"name"}),
        fields=("name", "businessCategory", "description"),
    ),
    StepDefinition(
        id=2,
        title="Select Platforms",
        required_fields=frozenset({"selectedPlatforms"}),
        fields=("selectedPlatforms",),
    ),
    StepDefinition(
        id=3,
        title="AI Configuration",
        required_fields=frozenset({"llmProvider", "systemPrompt"}),
        fields=("llmProvider", "systemPrompt"),
    ),
    StepDefinition(
        id=4,
        title="AI Training",
        fields=("trainingUrls", "trainingDocuments", "faqs"),
    ),
    StepDefinition(
        id=5,
        title="Platform Setup",
        fields=(
            "whatsappNumber",
            "whatsappApiKey",
            "whatsappWebhook",
            "facebookPageId",
            "facebookAccessToken",
            "facebookWebhook",
            "instagramBusinessId",
            "instagramAccessToken",
            "lineChannelId",
            "lineChannelSecret",
            "lineChannelToken",
            "telegramBotToken",
            "telegramUsername",
            "discordBotToken",
            "discordGuildId",
            "discordChannelId",
        ),
    ),
    StepDefinition(
        id=6,
        title="Customization",
        fields=("widgetColor", "welcomeMessage", "operatingHours"),
    ),
    StepDefinition(
        id=7,
        title="Review & Deploy",
    ),
)


@lru_cache
def business_onboarding_registry() -> StepRegistry:
    return StepRegistry(BUSINESS_ONBOARDING_STEPS)


@lru_cache
def agent_wizard_registry() -> StepRegistry:
    return StepRegistry(AGENT_WIZARD_STEPS)


def registry_for(flow: WizardFlow) -> StepRegistry:
    """Get the step registry backing a flow."""
    if WizardFlow(flow) == WizardFlow.AGENT:
        return agent_wizard_registry()
    return business_onboarding_registry()
