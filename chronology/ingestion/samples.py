"""Bundled sample dataset: Chinese dynasties, one `time,title` row each."""

SAMPLE_RECORDS = """# time,title (two columns; the layer comes from the file name or the text panel)
# ranges use ~ as separator; negative years are BCE (e.g. -2070~-1600)
# an open range such as 1949~ ends at the current year
-2070~-1600,夏
-1600~-1046,商
-1046~-256,周
-221~-207,秦
-202~8,西汉
9~23,新
25~220,东汉
220~266,魏
221~263,蜀汉
222~280,吴
266~316,西晋
317~420,东晋
420~589,南北朝
581~618,隋
618~907,唐
690~705,武周
907~960,五代
907~979,十国
916~1125,辽
960~1127,北宋
1127~1279,南宋
1038~1227,西夏
1115~1234,金
1271~1368,元
1368~1644,明
1636~1912,清
1912~1949,中华民国（大陆时期）
1949~,中华人民共和国
"""
