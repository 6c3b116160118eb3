import pytest

PROFILE_HTML = """
<html><body>
<div id="gsc_prf"><div id="gsc_prf_in">Jane Doe</div></div>
<table id="gsc_a_t"><tbody id="gsc_a_b">
<tr class="gsc_a_tr">
  <td class="gsc_a_t">
    <a href="/citations?view_op=view_citation&amp;hl=en&amp;user=abcUSER&amp;citation_for_view=abcUSER:1"
       class="gsc_a_at">Hyperbolic   metamaterials for imaging</a>
    <div class="gs_gray">A Smith, B Jones, C Lee, D Kim</div>
    <div class="gs_gray">Applied Physics Reviews 6 (4), 41308<span class="gs_oph">, 2019</span></div>
  </td>
  <td class="gsc_a_c"><a href="https://scholar.google.com/scholar?oi=bibs&amp;hl=en&amp;cites=111"
       class="gsc_a_ac gs_ibl">120</a></td>
  <td class="gsc_a_y"><span class="gsc_a_h gsc_a_hc gs_ibl">2019</span></td>
</tr>
<tr class="gsc_a_tr">
  <td class="gsc_a_t">
    <a href="/citations?view_op=view_citation&amp;hl=en&amp;user=abcUSER&amp;citation_for_view=abcUSER:2"
       class="gsc_a_at">Robot grasping, revisited</a>
    <div class="gs_gray">E Park, F Chen, ...</div>
    <div class="gs_gray">2020 IEEE International Conference on Robotics, 45-50</div>
  </td>
  <td class="gsc_a_c"></td>
  <td class="gsc_a_y"><span class="gsc_a_h gsc_a_hc gs_ibl">2020</span></td>
</tr>
<tr class="gsc_a_tr">
  <td class="gsc_a_t">
    <a href="/citations?view_op=view_citation&amp;hl=en&amp;user=abcUSER&amp;citation_for_view=abcUSER:3"
       class="gsc_a_at">Laser&nbsp;&nbsp;cutting study</a>
    <div class="gs_gray">G Wu</div>
    <div class="gs_gray">Optics &amp; Laser Technology 181, 111730, 2018</div>
  </td>
  <td class="gsc_a_c"><a href="/scholar?cites=333" class="gsc_a_ac gs_ibl">7</a></td>
  <td class="gsc_a_y"><span class="gsc_a_h gsc_a_hc gs_ibl"></span></td>
</tr>
</tbody></table>
<button id="gsc_bpf_more" class="gs_btnPD" type="button">Show more</button>
</body></html>
"""

EMPTY_PROFILE_HTML = """
<html><body><div id="gsc_prf"></div><table id="gsc_a_t"><tbody id="gsc_a_b">
<tr class="gsc_a_e"><td>There are no articles in this profile.</td></tr>
</tbody></table></body></html>
"""


@pytest.fixture
def profile_html():
    return PROFILE_HTML


@pytest.fixture
def empty_profile_html():
    return EMPTY_PROFILE_HTML
