"""
Message templates for the coach bot.

All user-facing copy lives here so stages stay free of wording.
"""

# ---------- Accepted response variations ----------
YES_WORDS = {"yes", "y", "yeah", "yep", "yup", "sure", "ok", "okay", "correct",
             "right", "of course", "definitely", "absolutely", "let's go", "lets go"}

NO_WORDS = {"no", "n", "nope", "nah", "not now", "not really", "wrong", "incorrect"}

RESUME_WORDS = {"back", "continue", "resume", "return"}


# ---------- Generic ----------
APOLOGY = "Sorry, something went wrong. Please try again."
STAGE_ERROR = 'Sorry, something went wrong. Type "{reset_keyword}" to start over.'
AI_FALLBACK_APOLOGY = "Sorry, I ran into a problem. Please try again."
YES = "Yes"
NO = "No"


# ---------- Identity verification ----------
GREETING = "Hi! To get started, please enter your full name."
ASK_NAME_AGAIN = "Okay, please enter your full name again."
NAME_EMPTY = "Please type your full name."
NO_MEMBER_FOUND = ("I couldn't find a member with that name. Please try again "
                   "or contact the club staff.")
TOO_MANY_MEMBERS = "I found several members with a similar name. Please type your full first and last name."
SELECT_MEMBER = "I found a few members with a similar name. Which one are you?"
SELECT_MEMBER_INVALID = "Please choose one of the options."
CONFIRM_MEMBER = """Are you {full_name}?
Phone number: {phone}
Date of birth: {birthday}"""
DIRECTORY_UNAVAILABLE = "Sorry, I can't look up members right now. Please send your name again in a few minutes."
VERIFIED = "Thanks for verifying!"


# ---------- Goal intake ----------
INTAKE_INTRO = ("Hi {first_name}, I'm your digital coach at the club. We'll start with a short "
                "round of questions so I can give you the best training experience. Shall we start?")
INTAKE_LATER = "No problem. Tomorrow is a great time to talk too."
INTAKE_START_REMINDER = "Hi again! Ready for a few quick questions about your training?"
ASK_GOAL = "Question 1: What is your main training goal?"
GOAL_CARDIO = "Cardio / fitness"
GOAL_HEALTH = "Weight loss / health"
GOAL_STRENGTH = "Strength progress"
GOAL_OPTIONS = [GOAL_CARDIO, GOAL_HEALTH, GOAL_STRENGTH]
GOAL_CODES = {GOAL_CARDIO: "cardio", GOAL_HEALTH: "health", GOAL_STRENGTH: "strength"}
GOAL_INVALID = "Please choose one of the options."
ASK_NUTRITION = "Great! Would you like guidance from the club's nutritionist?"
ASK_FREQUENCY = "How many times a week do you train?"
FREQUENCY_OPTIONS = ["1-2", "3-4", "5+"]
INTAKE_DONE = {
    "cardio": "Excellent! Great to see you come in with a high heart rate. Don't forget to add some strength work too.",
    "health": "Excellent! Consistency is what moves the needle for health goals.",
    "strength": "Excellent, let's start tracking your performance.",
}
NUTRITIONIST_NOTED = "We'll let the nutritionist know to contact you."


# ---------- Performance logging ----------
PERFORMANCE_INTRO = ("Next, a quick benchmark of your performance. "
                     "This way we can follow your progress and point you in the right direction.")
ASK_EXERCISE = "What is your result in {exercise}?"
ASK_EXERCISE_VALUE = "Please enter your result in {exercise} (for example 80kg or 12)."
EXERCISE_INVALID = "I didn't catch that. Please send a number, optionally with a unit (for example 80kg or 12)."
CAN_ANSWER = "I can answer"
REMIND_TOMORROW = "Remind me tomorrow"
REMIND_TOMORROW_ACK = "No problem, I'll remind you tomorrow."
EXERCISE_BUTTONS = [CAN_ANSWER, REMIND_TOMORROW]
PERFORMANCE_DONE = "Thank you. All your results are saved so we can follow your progress."


# ---------- Check-in ----------
CHECKIN_INTRO = "From now on I'll check in with you around your workouts. Message me before or after training."
ASK_ENERGY = "On a scale of 1 to 5, how energetic do you feel right now?"
ASK_WORKOUT_RATING = "On a scale of 1 to 5, how was your workout today?"
RATING_INVALID = "Please answer with a number from 1 to 5."
ASK_HEAVIER = "Did you lift heavier than last time?"
CHECKIN_ENERGY_THANKS = "Thanks! Have a great workout 💪"
CHECKIN_WORKOUT_THANKS = "Thanks! Logged. Recovery is part of training too 📈"


# ---------- Escalation ----------
ESCALATION = """Sure, a coach will take it from here. Tap the link to message them:
{link}

When you're done, send "back" to continue where you left off."""
ESCALATION_NO_CONTACT = 'Please speak to a coach at the front desk. Send "back" to continue where you left off.'
ESCALATION_PREFILL = "Hi, this is {name}. I'd like to talk to a coach."
ESCALATION_PREFILL_ANONYMOUS = "Hi, I'd like to talk to a coach."
ESCALATION_RESUMED = "Welcome back!"


# ---------- Inactivity reminders (stage -> tier -> text) ----------
REMINDERS = {
    "verification": {
        "first": "Hi! Just send your full name whenever you're ready and we'll get started.",
        "second": "Hi! We're still waiting to get you set up. Send your full name to start.",
    },
    "goal_intake": {
        "first": "Hi! Just a reminder: a few quick questions and we're done with your goals.",
        "second": "Hi! Knowing your goals helps us coach you better. Reply whenever you're free 🙏",
    },
    "performance": {
        "first": "Hi! Just a reminder that we'd love your benchmark results. I'm happy to help you track your performance 💪",
        "second": "Hi! Tracking your progress matters to us. Please update me when you have a moment 🙏",
    },
    "checkin": {
        "first": "Hi! I'd love to hear how your workout went today 🏋️",
        "second": "Hi! Knowing how the workout went helps us follow your progress 📈",
    },
}
DEFAULT_REMINDERS = {
    "first": "Hi! Just checking in. Reply whenever you're ready.",
    "second": "Hi! We're still here whenever you want to continue.",
}


# ---------- Summary ----------
SUMMARY_TITLE = "Progress summary 📊"
SUMMARY_NAME = "Member: {name}"
SUMMARY_GOAL = "Goal: {goal}"
SUMMARY_FREQUENCY = "Training per week: {weekly_sessions}"
SUMMARY_RESULTS = "🏋️ Benchmark results:"
SUMMARY_NO_RESULTS = "No benchmark results recorded yet."
SUMMARY_CHECKINS = "Check-ins this week: {count}"
SUMMARY_AVG_ENERGY = "Average energy: {value:.1f}/5"
SUMMARY_AVG_WORKOUT = "Average workout rating: {value:.1f}/5"
SUMMARY_HEAVIER = "Sessions heavier than last time: {count}"
SUMMARY_MOTIVATION_HIGH = "Great consistency! You're on the right track 🌟"
SUMMARY_MOTIVATION_SOME = "Good start! Let's aim for a few more sessions next week."
SUMMARY_MOTIVATION_NONE = "New week, new opportunity! Let's start it strong 💪"
