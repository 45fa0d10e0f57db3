"""
Coaching content for each swing metric: scoring rubrics, curated default
insights and recommendation templates
"""

from typing import Dict, List

DEFAULT_RECOMMENDATIONS: List[str] = [
    "Work on your overall swing mechanics",
    "Practice your timing and rhythm",
    "Focus on maintaining proper form throughout your swing",
]

RUBRIC_BANDS = ("90+", "70-89", "50-69", "<50")

# Four scoring bands per canonical metric, in RUBRIC_BANDS order
METRIC_RUBRICS: Dict[str, List[str]] = {
    "confidence": [
        "Decisive pre-shot routine, no hesitation, fully committed through the finish",
        "Committed swing with a brief pause or re-grip before takeaway",
        "Visible hesitation, tentative takeaway or deceleration into the ball",
        "Swing is guided or abandoned, several restarts or flinching at impact",
    ],
    "focus": [
        "Consistent routine, eyes settled on the ball, no distraction from setup to finish",
        "Routine mostly consistent with small lapses in attention",
        "Rushed or irregular setup, looking up early",
        "No routine, attention clearly elsewhere during the swing",
    ],
    "stance": [
        "Shoulder-width base, parallel alignment, athletic posture with spine tilt held",
        "Good base with a small alignment or width error",
        "Noticeable alignment issue, too narrow or too wide, weight on heels or toes",
        "Unbalanced setup, open or closed far beyond intent, posture collapses",
    ],
    "grip": [
        "Neutral grip, two to three knuckles visible, light and even pressure",
        "Slightly strong or weak grip that the swing compensates for",
        "Clearly strong or weak grip, palm grip or visible tension",
        "Hands split or fighting each other, grip changes during the swing",
    ],
    "ballPosition": [
        "Ball placed correctly for the club, consistent relative to the lead heel",
        "Ball within a ball-width of the ideal position",
        "Ball clearly too far forward or back for the club",
        "Ball position forces compensations in posture or path",
    ],
    "backswing": [
        "One-piece takeaway, club on plane, full shoulder turn with wrists set at the top",
        "Good width and turn with a minor plane or wrist issue",
        "Takeaway too far inside or outside, short turn or over-swing",
        "Arms-only backswing, club far off plane, loss of posture",
    ],
    "swingForward": [
        "Lower body starts the transition, club drops on plane, hands lead at impact",
        "Sound sequence with a slight over-the-top or early release tendency",
        "Upper body starts the downswing, path clearly out-to-in or in-to-out",
        "Casting from the top, no sequence, path far off target line",
    ],
    "swingSpeed": [
        "Efficient acceleration peaking at the ball, speed matched to the club",
        "Good speed with a small leak before impact",
        "Decelerates through impact or peaks too early",
        "Little clubhead speed or wild effort that destroys balance",
    ],
    "shallowing": [
        "Shaft flattens in transition and approaches from the inside on plane",
        "Shaft shallows but slightly late or only partially",
        "Shaft stays steep through transition",
        "Shaft steepens and crosses over, approach far outside",
    ],
    "impactPosition": [
        "Shaft leaning forward, hips open, weight on the lead side, clubface square",
        "Solid impact with a small flaw in shaft lean or face angle",
        "Flipping hands, weight on the trail side or face clearly open or closed",
        "Scooping motion, posture lost, inconsistent contact evident",
    ],
    "stiffness": [
        "Relaxed arms and shoulders, fluid motion from start to finish",
        "Mostly relaxed with some tension in grip or forearms",
        "Visible tension restricts turn or release",
        "Rigid body, jerky motion throughout",
    ],
    "hipRotation": [
        "Full hip turn going back, hips lead and clear through impact",
        "Good rotation with a small sway or slide",
        "Restricted turn or hips stall through impact",
        "Hips slide laterally instead of rotating, no separation from shoulders",
    ],
    "pacing": [
        "Smooth 3:1 backswing to downswing tempo, unhurried transition",
        "Good rhythm with a slightly quick transition",
        "Rushed backswing or abrupt change of direction",
        "Tempo erratic, the swing has no recognisable rhythm",
    ],
    "followThrough": [
        "Full balanced finish, chest facing target, weight on the lead foot",
        "Complete finish with minor balance issues",
        "Abbreviated finish or falling back",
        "No finish, swing stops at impact or golfer loses balance",
    ],
    "headPosition": [
        "Head stays centred and steady until after impact",
        "Minor head movement that does not affect contact",
        "Head moves off the ball or lifts early",
        "Large head movement causing posture changes",
    ],
    "shoulderPosition": [
        "Full 90 degree shoulder turn on a consistent tilt",
        "Good turn slightly short of full or slightly flat",
        "Restricted turn or shoulders too level",
        "Shoulders barely rotate or spin open early",
    ],
    "armPosition": [
        "Lead arm extended, trail elbow tucked, arms connected to the body",
        "Good structure with minor breakdown at the top",
        "Lead arm bends noticeably or chicken wing through impact",
        "Arms disconnected, flying elbow and collapsing structure",
    ],
}


# Curated fallback insights per canonical metric
DEFAULT_INSIGHTS: Dict[str, Dict[str, List[str]]] = {
    "confidence": {
        "goodAspects": ["You commit to the shot once the swing starts",
                        "Your setup shows you know the target you are playing to"],
        "improvementAreas": ["Small hesitations before the takeaway",
                             "Slight deceleration when the result matters"],
        "technicalBreakdown": ["Commitment shows in a smooth transition and full release",
                               "Hesitation usually appears as a stalled takeaway or a guided downswing"],
        "recommendations": ["Build a repeatable pre-shot routine of the same length every time",
                            "Pick a small target and commit to it before you step in"],
        "feelTips": ["Feel like the decision is finished before you address the ball"],
    },
    "focus": {
        "goodAspects": ["You settle over the ball before starting the swing",
                        "Your eyes stay on the ball through most of the motion"],
        "improvementAreas": ["Routine length varies between swings",
                             "Attention drifts toward the target early"],
        "technicalBreakdown": ["A consistent routine narrows attention to one swing thought",
                               "Looking up early often changes posture and contact"],
        "recommendations": ["Use one swing thought per shot",
                            "Keep your eyes on the back of the ball until it is gone"],
        "feelTips": ["Feel quiet eyes on a single dimple of the ball"],
    },
    "stance": {
        "goodAspects": ["Your base gives you a stable platform",
                        "Your posture has a good athletic knee flex"],
        "improvementAreas": ["Alignment of feet, hips and shoulders is not fully parallel",
                             "Weight tends to sit toward the heels"],
        "technicalBreakdown": ["Stance width should be about shoulder width for mid irons",
                               "Spine tilt away from the target sets up the swing plane"],
        "recommendations": ["Lay an alignment stick along your toe line during practice",
                            "Check your setup in a mirror once per session"],
        "feelTips": ["Feel your weight on the balls of your feet, ready to move"],
    },
    "grip": {
        "goodAspects": ["Your hands work together as a unit",
                        "Grip pressure looks light enough for a free release"],
        "improvementAreas": ["Lead hand position drifts between swings",
                             "Pressure increases at the top of the swing"],
        "technicalBreakdown": ["A neutral grip shows two to three knuckles of the lead hand",
                               "The V of both hands should point between chin and trail shoulder"],
        "recommendations": ["Check grip position with a marked training grip",
                            "Hold the club at a pressure of four on a scale of ten"],
        "feelTips": ["Feel the club in your fingers rather than your palms"],
    },
    "ballPosition": {
        "goodAspects": ["Ball position is close to correct for the club",
                        "You set the ball consistently relative to your stance"],
        "improvementAreas": ["Ball drifts back in your stance with longer clubs",
                             "Position changes between swings"],
        "technicalBreakdown": ["Driver plays off the lead heel, mid irons near centre",
                               "Wrong ball position forces the low point of the swing to move"],
        "recommendations": ["Use a club on the ground to mark ball position while practising",
                            "Move the ball one ball-width forward as the club gets longer"],
        "feelTips": ["Feel the ball sit under your lead armpit with the driver"],
    },
    "backswing": {
        "goodAspects": ["Your takeaway starts with the shoulders rather than the hands",
                        "You create good width early in the backswing"],
        "improvementAreas": ["The club moves inside too quickly",
                             "Wrist set at the top is inconsistent"],
        "technicalBreakdown": ["At waist height the shaft should be parallel to the target line",
                               "At the top the lead wrist should be flat or slightly bowed"],
        "recommendations": ["Practise the one-piece takeaway with a club across your chest",
                            "Pause at the top for a second to check the club position"],
        "feelTips": ["Feel your lead shoulder push the club away low and slow"],
    },
    "swingForward": {
        "goodAspects": ["Your lower body starts the downswing",
                        "Hands lead the clubhead into impact"],
        "improvementAreas": ["Upper body fires too early from the top",
                             "Path moves across the ball from outside"],
        "technicalBreakdown": ["Transition begins with pressure moving to the lead foot",
                               "The club should approach from inside the target line"],
        "recommendations": ["Practise step-through drills to train lower body sequence",
                            "Place a headcover outside the ball to discourage an over-the-top path"],
        "feelTips": ["Feel your hips turn before your shoulders unwind"],
    },
    "swingSpeed": {
        "goodAspects": ["You generate good clubhead speed",
                        "Acceleration continues through the ball"],
        "improvementAreas": ["Speed peaks before impact",
                             "Effort level reduces balance at the finish"],
        "technicalBreakdown": ["Speed comes from sequence and lag, not arm effort",
                               "Maximum speed should occur just after the ball"],
        "recommendations": ["Do whoosh drills with the club turned upside down",
                            "Swing at 80 percent effort and hold the finish"],
        "feelTips": ["Feel the swoosh of the club past your lead foot"],
    },
    "shallowing": {
        "goodAspects": ["The shaft drops toward the slot in transition",
                        "The club approaches the ball on a reasonable path"],
        "improvementAreas": ["The shaft stays steep early in the downswing",
                             "Trail elbow moves away from the body"],
        "technicalBreakdown": ["Shallowing lays the shaft flatter as the lower body leads",
                               "A steep shaft often produces pulls and slices"],
        "recommendations": ["Practise the pump drill, dropping the club into the slot",
                            "Feel the trail elbow work in front of the trail hip"],
        "feelTips": ["Feel the clubhead fall behind your hands in transition"],
    },
    "impactPosition": {
        "goodAspects": ["Contact looks centred on the face",
                        "Your weight has moved to the lead side"],
        "improvementAreas": ["Hands are level with or behind the ball",
                             "Hips are square instead of open at impact"],
        "technicalBreakdown": ["At impact the shaft leans toward the target",
                               "Hips should be open 30 to 45 degrees with shoulders near square"],
        "recommendations": ["Use an impact bag to train forward shaft lean",
                            "Hit half swings focusing on hands ahead of the ball"],
        "feelTips": ["Feel like you are trapping the ball with a flat lead wrist"],
    },
    "stiffness": {
        "goodAspects": ["Your motion has a natural flow",
                        "Arms stay soft at address"],
        "improvementAreas": ["Tension builds in the forearms",
                             "Shoulders tighten at the top"],
        "technicalBreakdown": ["Tension restricts rotation and slows the release",
                               "Relaxed muscles move faster than tense ones"],
        "recommendations": ["Take a deep breath and exhale before starting the swing",
                            "Waggle the club to keep the hands loose"],
        "feelTips": ["Feel your arms hang like wet towels at address"],
    },
    "hipRotation": {
        "goodAspects": ["Your hips turn rather than slide",
                        "The lead hip clears through impact"],
        "improvementAreas": ["Limited hip turn in the backswing",
                             "Hips stall before impact"],
        "technicalBreakdown": ["Hips turn about 45 degrees going back",
                               "Separation between hips and shoulders stores power"],
        "recommendations": ["Practise with a club across your hips to feel rotation",
                            "Keep the trail knee flexed to allow the hips to turn"],
        "feelTips": ["Feel your belt buckle face the target at the finish"],
    },
    "pacing": {
        "goodAspects": ["Your swing has a recognisable rhythm",
                        "The transition is not rushed"],
        "improvementAreas": ["Tempo speeds up under pressure",
                             "Backswing is quicker than needed"],
        "technicalBreakdown": ["Tour players share a tempo ratio near 3:1",
                               "A rushed transition disrupts the sequence"],
        "recommendations": ["Count one-two-three on the backswing and four on the downswing",
                            "Practise with a metronome set to a steady beat"],
        "feelTips": ["Feel the swing go back slowly and gather speed through the ball"],
    },
    "followThrough": {
        "goodAspects": ["You complete the turn to face the target",
                        "Balance holds through the finish"],
        "improvementAreas": ["Weight stays on the trail foot",
                             "Arms stop short after impact"],
        "technicalBreakdown": ["A full finish is the result of a free release",
                               "Nearly all weight should be on the lead foot"],
        "recommendations": ["Hold your finish for three seconds on every practice swing",
                            "Finish with the trail foot on its toe"],
        "feelTips": ["Feel tall and balanced like a statue at the finish"],
    },
    "headPosition": {
        "goodAspects": ["Your head stays steady through the backswing",
                        "Eyes remain level at address"],
        "improvementAreas": ["Head lifts before impact",
                             "Head sways away from the target"],
        "technicalBreakdown": ["A steady head keeps the swing centre stable",
                               "Small rotation of the head is acceptable, lateral movement is not"],
        "recommendations": ["Have a friend hold a club near your head while you swing",
                            "Keep your eyes on the ball until after impact"],
        "feelTips": ["Feel your head stay behind the ball at impact"],
    },
    "shoulderPosition": {
        "goodAspects": ["Your shoulders turn on a consistent tilt",
                        "Lead shoulder moves under the chin at the top"],
        "improvementAreas": ["Shoulder turn is short of 90 degrees",
                             "Shoulders open too early in the downswing"],
        "technicalBreakdown": ["Shoulders should rotate around a tilted spine",
                               "Early opening throws the club outside the line"],
        "recommendations": ["Practise turning your back to the target at the top",
                            "Keep your chest pointing at the ball longer in the downswing"],
        "feelTips": ["Feel your back face the target at the top"],
    },
    "armPosition": {
        "goodAspects": ["Lead arm stays reasonably straight",
                        "Arms stay in front of the chest"],
        "improvementAreas": ["Trail elbow flies away at the top",
                             "Lead arm bends through impact"],
        "technicalBreakdown": ["Connection keeps the arms synchronised with the body turn",
                               "A chicken wing finish reduces distance and control"],
        "recommendations": ["Swing with a towel under both armpits",
                            "Extend both arms toward the target after impact"],
        "feelTips": ["Feel your arms and chest move together as one unit"],
    },
}

GENERIC_INSIGHTS: Dict[str, List[str]] = {
    "goodAspects": ["You show a solid foundation in this area"],
    "improvementAreas": ["There is room to make this part of the swing more consistent"],
    "technicalBreakdown": ["This element affects consistency and contact quality"],
    "recommendations": ["Practise this element slowly with a mirror or video feedback"],
    "feelTips": ["Feel a smooth and balanced motion"],
}


# Recommendation templates used by the mock analyzer for its weakest metrics
RECOMMENDATION_POOLS: Dict[str, List[str]] = {
    "confidence": ["Commit fully to your target before starting the swing",
                   "Use a consistent pre-shot routine to quiet doubts"],
    "focus": ["Pick a single swing thought and stick with it",
              "Keep your eyes on the ball through impact"],
    "stance": ["Check that your feet, hips and shoulders align parallel to the target",
               "Widen your stance slightly for better balance"],
    "grip": ["Lighten your grip pressure to allow a free release",
             "Rotate your lead hand so two knuckles are visible"],
    "ballPosition": ["Move the ball slightly forward for longer clubs",
                     "Use an alignment stick to keep ball position consistent"],
    "backswing": ["Start the takeaway with your shoulders, not your hands",
                  "Keep the club on plane as it reaches waist height"],
    "swingForward": ["Start the downswing with your lower body",
                     "Swing from the inside to avoid an over-the-top path"],
    "swingSpeed": ["Accelerate through the ball rather than at it",
                   "Build speed with a relaxed grip and a full turn"],
    "shallowing": ["Let the club drop into the slot during transition",
                   "Keep your trail elbow close to your body in the downswing"],
    "impactPosition": ["Lead with your hands at impact for forward shaft lean",
                       "Shift your weight to the lead side before impact"],
    "stiffness": ["Release tension in your arms and shoulders at address",
                  "Take a deep breath before each swing to stay relaxed"],
    "hipRotation": ["Rotate your hips more aggressively through impact",
                    "Turn your hips fully in the backswing to load power"],
    "pacing": ["Maintain a more consistent tempo throughout your swing",
               "Slow down your transition from backswing to downswing"],
    "followThrough": ["Hold a balanced finish facing the target",
                      "Extend your arms fully after impact"],
    "headPosition": ["Keep your head steady until after impact",
                     "Stay behind the ball with your head through impact"],
    "shoulderPosition": ["Complete a full shoulder turn in the backswing",
                         "Keep your shoulders closed longer in the downswing"],
    "armPosition": ["Keep your lead arm extended at the top of the swing",
                    "Keep your arms connected to your body through impact"],
}
