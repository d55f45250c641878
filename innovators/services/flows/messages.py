from innovators.schemas.session import SubmitStep

QUESTIONS = {
    SubmitStep.PROBLEM: "What problem did you solve with AI? (Describe the challenge you faced)",
    SubmitStep.SOLUTION: "What AI tool or solution did you use? (e.g., ChatGPT, Claude, Copilot, custom script)",
    SubmitStep.TIME_SAVED: "How much time did this save you? (e.g., '2 hours per week', '30 minutes per report')",
    SubmitStep.REUSABLE_BY: (
        "Who else in the company could benefit from this? "
        "(e.g., 'All project managers', 'Sales team', 'Anyone who writes reports')"
    ),
    SubmitStep.HOW_TO_REUSE: (
        "How could someone else reuse it? (e.g., 'Copy my prompt template', 'Install the same extension')"
    ),
}

WELCOME_MESSAGE = """👋 Hey! I'm the *Innovators Circle Bot*. I can help you in three ways:

*1️⃣ Submit a solution* - Share an AI win with the team
*2️⃣ Get help* - Find existing tools or get AI recommendations for your challenge
*3️⃣ Chat* - Brainstorm AI solutions for a challenge you're facing

What would you like to do? Reply with *"submit"*, *"help"*, or *"chat"*"""

COMMANDS_HELP = """🤖 *Innovators Circle Commands*

*Quick Actions:*
• `/submit` - Share an AI win with the team
• `/help` - Get AI recommendations for a challenge
• `/chat` - Brainstorm freely
• `/innovators-circle` - See the Innovators Circle hall of fame
• `/new` - Start a fresh conversation
• `/tools` - List all approved AI tools
• `/tools [search]` - Search tools (e.g., `/tools writing`)
• `/workflows [team]` - Show AI workflows for a team
• `/tip` - Get a random AI tip or recent win

*In conversation:*
• Type `cancel` to exit current flow
• Type `submit` to switch to submission mode

Just message me directly to ask about AI solutions!"""

SUBMIT_OPENING = f"Great! Let's capture your AI win. 🎯\n\n{QUESTIONS[SubmitStep.PROBLEM]}"
SUBMIT_SWITCH = f"Switching to submission mode! 🎯\n\n{QUESTIONS[SubmitStep.PROBLEM]}"
SUBMIT_CANCELLED = "Submission cancelled. Message me anytime to start over!"
SUBMIT_POLISHING = "Thanks! Let me polish that up for you... ✨"
SUBMIT_REVIEW_PROMPT = (
    "Reply *submit* to send it in, or tell me what to change "
    "(e.g., 'make the time saved 3 hours/week'). Type `cancel` to discard."
)
SUBMIT_POLISH_FAILED = "Sorry, there was an error processing your submission. Please try again with `/submit`."
SUBMIT_EDIT_FAILED = "Sorry, I couldn't apply that change. Please try again, or reply *submit* to send it as is."
SUBMIT_SAVE_FAILED = "Sorry, I couldn't save your submission just now. Reply *submit* to try again."
SUBMIT_CONFIRMED = (
    "✅ *Got it!* Your solution has officially been submitted!\n\n"
    "If your idea gets rolled out company-wide, you'll earn:\n"
    "🍽️ A night out on us!\n"
    "🏆 A spot in the *Innovators Circle* hall of fame\n\n"
    "Thanks for being a problem solver. 💪\n\n"
    "Have another brilliant idea? Just type `submit` anytime!"
)

HELP_CANCELLED = "No problem! Message me anytime you need help."
HELP_CHALLENGE_PROMPT = """🔍 *Let's find a solution for you!*

What challenge are you trying to solve? Be specific - what task takes too long, what's frustrating, or what would you like to automate?"""
HELP_THINKING = "Let me think about that... 🤔"

CHAT_OPENING = "I'm ready to help you brainstorm! What challenge are you trying to solve with AI?"
CHAT_CLEARED = "Chat cleared! Message me anytime to start fresh."

FRESH_START = "✨ Fresh start! What can I help you with?"
TESTING_MODE = "🚧 This bot is currently in testing mode. Check back soon!"
ADMIN_ONLY = "🔒 This command is admin-only."
RETRY_LATER = "Sorry, I had trouble processing that. Could you try again?"


def submit_review_message(summary: str) -> str:
    return f"🎉 Here's your polished submission:\n\n{summary}\n\n{SUBMIT_REVIEW_PROMPT}"


def help_department_prompt(example_teams: str) -> str:
    return (
        "🔍 *Let's find a solution for you!*\n\n"
        f"First, what team are you on? (e.g., {example_teams})\n"
        "_Type `skip` if you'd rather not say._"
    )


def help_department_retry(example_teams: str) -> str:
    return (
        "Hmm, I didn't recognize that team. 🤔\n\n"
        f"Try one of these: {example_teams}\n"
        "_Or type `skip` to go straight to your challenge._"
    )


def help_challenge_prompt(department: str) -> str:
    return (
        f"Got it, *{department}*! 👍\n\n"
        "What challenge are you trying to solve? Be specific - what task takes too long, "
        "what's frustrating, or what would you like to automate?"
    )
